"""
Height and scroll settling for the conversation view.

After content changes, the embedding page needs the new content height so it
can resize its frame. Measurements are delayed briefly so rendering can
finish, and calls arriving within that delay are coalesced into one report.
"""

import logging
from typing import Callable, List, Optional

from config import Settings, settings as default_settings
from core.conversation.interfaces import HostChannel, Viewport
from core.conversation.pipeline import Scheduler
from models.schemas import HostMessage

from .host_channel import send_to_host

logger = logging.getLogger(__name__)


class HeightSettler:
    """Reports content height changes and scrolls to the latest card"""

    def __init__(self, viewport: Viewport, host_channel: HostChannel,
                 scheduler: Scheduler, settings: Optional[Settings] = None):
        self.viewport = viewport
        self.host_channel = host_channel
        self.scheduler = scheduler
        self.settings = settings or default_settings

        self.last_requested_height = 0
        self.last_requested_scroll = False

        self._pending = None
        self._pending_scroll = False
        self._continuations: List[Callable[[], None]] = []

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def settle(self, scroll: bool = False, callback: Optional[Callable[[], None]] = None):
        """
        Schedule a height check.

        Args:
            scroll: Also scroll to the latest card
            callback: Called once the height (and scroll, if requested) settles
        """
        if callback:
            self._continuations.append(callback)
        self._pending_scroll = self._pending_scroll or scroll

        if self._pending is None:
            self._pending = self.scheduler.call_later(
                self.settings.HEIGHT_MEASURE_DELAY, self._measure
            )

    def scroll_to_latest(self, callback: Optional[Callable[[], None]] = None):
        self.settle(scroll=True, callback=callback)

    def _measure(self):
        scroll = self._pending_scroll
        continuations = self._continuations
        self._pending = None
        self._pending_scroll = False
        self._continuations = []

        new_height = self.viewport.get_content_height()
        if (abs(self.last_requested_height - new_height) > self.settings.HEIGHT_THRESHOLD or
                (scroll and not self.last_requested_scroll)):
            new_height += self.settings.HEIGHT_MARGIN
            send_to_host(self.host_channel, HostMessage.height_change(new_height, scroll))
            logger.debug(f"Reported height {new_height} (scroll={scroll})")
            self.last_requested_height = new_height
            self.last_requested_scroll = scroll

        if scroll:
            self.viewport.scroll_to_latest(
                self.settings.SCROLL_DURATION,
                lambda: self._run(continuations)
            )
        else:
            self._run(continuations)

    def _run(self, continuations: List[Callable[[], None]]):
        for continuation in continuations:
            continuation()
