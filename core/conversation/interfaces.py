"""
Collaborator contracts for the conversation controller.

The controller never renders interactions or grades answers itself. It talks
to these abstract collaborators, all of which report back through callbacks
so that one controller can be driven by an asyncio loop or a virtual clock.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from models.schemas import HostMessage, InitialState, TransitionResult

ErrorCallback = Callable[[Exception], None]


class InteractionProvider(ABC):
    """Supplies exploration content and per-state interaction details."""

    @abstractmethod
    def init(self, on_ready: Callable[[InitialState], None], on_error: ErrorCallback) -> None:
        """
        Load the exploration and report its initial state.

        Args:
            on_ready: Called once with the initial state
            on_error: Called instead of on_ready if loading fails
        """
        pass

    @abstractmethod
    def get_interaction_markup(self, state_id: str) -> str:
        pass

    @abstractmethod
    def is_interaction_inline(self, state_id: str) -> bool:
        pass

    @abstractmethod
    def is_terminal(self, state_id: str) -> bool:
        pass

    @abstractmethod
    def get_render_token(self) -> str:
        """Opaque value appended to markup to force a remount"""
        pass

    @abstractmethod
    def render_answer(self, answer: Any) -> str:
        """Render a learner answer for display in its card"""
        pass

    def is_in_preview_mode(self) -> bool:
        return False

    def get_exploration_id(self) -> Optional[str]:
        return None

    def get_exploration_title(self) -> Optional[str]:
        return None

    def register_maybe_leave_event(self) -> None:
        """Record that the learner may be leaving mid-exploration"""
        pass

    def open_feedback_form(self, state_id: str) -> None:
        """Open the learner-to-author feedback form for a card"""
        pass


class AnswerEvaluator(ABC):
    """Grades answers and decides the next state."""

    @abstractmethod
    def submit(self, answer: Any, handler_id: str,
               on_result: Callable[[TransitionResult], None],
               on_error: ErrorCallback) -> None:
        """
        Submit an answer for evaluation.

        Args:
            answer: Collaborator-defined answer value
            handler_id: Selects the grading entry point
            on_result: Called with the transition once evaluated
            on_error: Called if evaluation fails
        """
        pass


class HostChannel(ABC):
    """Fire-and-forget messaging to the embedding page."""

    @abstractmethod
    def send(self, message: HostMessage) -> None:
        pass


class Viewport(ABC):
    """The rendered conversation as seen by the learner."""

    @abstractmethod
    def get_content_height(self) -> int:
        pass

    @abstractmethod
    def scroll_to_top(self) -> None:
        pass

    @abstractmethod
    def scroll_to_latest(self, duration: float, on_done: Callable[[], None]) -> None:
        """Animate to the latest card and call on_done when the scroll settles"""
        pass
