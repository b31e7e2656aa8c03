"""
Integration adapter for serving the conversation player.

This module wires a controller to the collaborators used when the player is
rendered by a remote client: a buffered host channel the client polls, and a
viewport fed with the heights the client reports.
"""

import logging
from typing import Any, Dict, List, Optional

from config import Settings, settings as default_settings
from core.conversation.interfaces import AnswerEvaluator, InteractionProvider
from core.conversation.orchestration import ConversationController
from core.conversation.pipeline import AsyncioScheduler, Scheduler
from core.conversation.presentation import BufferedHostChannel, ReportedViewport
from models.schemas import ConversationSession, HostMessage

logger = logging.getLogger(__name__)


class PlayerAdapter:
    """
    Adapter between the HTTP surface and one learner's conversation.

    There is exactly one session per adapter.
    """

    def __init__(self, provider: InteractionProvider, evaluator: AnswerEvaluator,
                 scheduler: Optional[Scheduler] = None,
                 settings: Optional[Settings] = None):
        """
        Initialize the adapter.

        Args:
            provider: Exploration content source
            evaluator: Answer grading collaborator
            scheduler: Timer source (defaults to the running asyncio loop)
            settings: Pacing configuration
        """
        self.settings = settings or default_settings
        self.scheduler = scheduler or AsyncioScheduler()
        self.host_channel = BufferedHostChannel()
        self.viewport = ReportedViewport(self.scheduler)
        self.controller = ConversationController(
            provider, evaluator, self.host_channel, self.viewport,
            self.scheduler, self.settings
        )
        self.initialized = False

    def initialize(self) -> ConversationSession:
        self.controller.initialize()
        self.initialized = True
        return self.controller.snapshot()

    def submit_answer(self, answer: Any, handler_id: str) -> Dict[str, Any]:
        accepted = self.controller.submit_answer(answer, handler_id)
        return {"accepted": accepted, "session": self.controller.snapshot()}

    def request_card_feedback(self, state_id: str) -> Dict[str, Any]:
        opened = self.controller.open_card_feedback(state_id)
        warning = None if opened else self.settings.PREVIEW_FEEDBACK_WARNING
        return {"accepted": opened, "warning": warning, "session": self.controller.snapshot()}

    def report_resize(self, content_height: int) -> ConversationSession:
        self.viewport.report_content_height(content_height)
        self.controller.on_resize()
        return self.controller.snapshot()

    def before_unload(self) -> Optional[str]:
        return self.controller.before_unload()

    def session(self) -> ConversationSession:
        return self.controller.snapshot()

    def drain_messages(self) -> List[HostMessage]:
        return self.host_channel.drain()
