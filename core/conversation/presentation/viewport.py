"""Viewport backed by heights reported from the client."""

from typing import Callable

from core.conversation.interfaces import Viewport
from core.conversation.pipeline import Scheduler


class ReportedViewport(Viewport):
    """
    Viewport for a player rendered on the client.

    The client reports its content height (on load and on every resize). The
    scroll animation runs on the client, so it is modelled here as a delay of
    the animation's duration.
    """

    def __init__(self, scheduler: Scheduler, content_height: int = 0):
        self.scheduler = scheduler
        self.content_height = content_height

    def report_content_height(self, height: int):
        if height < 0:
            raise ValueError("Content height cannot be negative")
        self.content_height = height

    def get_content_height(self) -> int:
        return self.content_height

    def scroll_to_top(self) -> None:
        # The client resets its own scroll position when it loads
        pass

    def scroll_to_latest(self, duration: float, on_done: Callable[[], None]) -> None:
        self.scheduler.call_later(duration, on_done)
