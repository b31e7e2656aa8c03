"""
Fake collaborators shared by the conversation player tests.

Each fake records what the controller asked of it so tests can drive
evaluator outcomes and inspect host messages explicitly.
"""

from typing import Any, Callable, Dict, List, Optional, Set

from core.conversation.interfaces import AnswerEvaluator, HostChannel, InteractionProvider, Viewport
from core.conversation.pipeline import VirtualClockScheduler
from models.schemas import HostMessage, InitialState, LifecycleEvent, TransitionResult


class FakeProvider(InteractionProvider):
    """In-memory exploration with configurable states."""

    def __init__(self, initial_state: str = "S0", initial_content: str = "What is 2 + 2?",
                 terminal_states: Optional[Set[str]] = None, preview: bool = False,
                 respond_immediately: bool = True):
        self.initial_state = initial_state
        self.initial_content = initial_content
        self.terminal_states = terminal_states if terminal_states is not None else {"END"}
        self.preview = preview
        self.respond_immediately = respond_immediately
        self.inline_states: Set[str] = set()
        self.init_calls: List[Dict[str, Callable]] = []
        self.leave_events = 0
        self.feedback_forms: List[str] = []
        self._tokens = 0

    def init(self, on_ready, on_error) -> None:
        self.init_calls.append({"on_ready": on_ready, "on_error": on_error})
        if self.respond_immediately:
            on_ready(self.initial())

    def initial(self) -> InitialState:
        return InitialState(state_id=self.initial_state, content=self.initial_content)

    def get_interaction_markup(self, state_id: str) -> str:
        return f"<interaction state='{state_id}'>"

    def is_interaction_inline(self, state_id: str) -> bool:
        return state_id in self.inline_states

    def is_terminal(self, state_id: str) -> bool:
        return state_id in self.terminal_states

    def get_render_token(self) -> str:
        self._tokens += 1
        return f"#{self._tokens}"

    def render_answer(self, answer: Any) -> str:
        return f"<answer>{answer}</answer>"

    def is_in_preview_mode(self) -> bool:
        return self.preview

    def get_exploration_id(self) -> Optional[str]:
        return "exp-1"

    def get_exploration_title(self) -> Optional[str]:
        return "Arithmetic"

    def register_maybe_leave_event(self) -> None:
        self.leave_events += 1

    def open_feedback_form(self, state_id: str) -> None:
        self.feedback_forms.append(state_id)


class FakeEvaluator(AnswerEvaluator):
    """Records submissions; tests resolve them explicitly."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []

    def submit(self, answer, handler_id, on_result, on_error) -> None:
        self.calls.append({
            "answer": answer,
            "handler_id": handler_id,
            "on_result": on_result,
            "on_error": on_error,
        })

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def resolve(self, new_state_id: Optional[str], refresh_interaction: bool = False,
                feedback: str = "", next_prompt: str = "",
                new_interaction_id: Optional[str] = None, index: int = -1):
        self.calls[index]["on_result"](TransitionResult(
            new_state_id=new_state_id,
            refresh_interaction=refresh_interaction,
            feedback=feedback,
            next_prompt=next_prompt,
            new_interaction_id=new_interaction_id,
        ))

    def fail(self, error: Exception, index: int = -1):
        self.calls[index]["on_error"](error)


class RecordingHostChannel(HostChannel):
    def __init__(self):
        self.messages: List[HostMessage] = []

    def send(self, message: HostMessage) -> None:
        self.messages.append(message)

    def events(self, event: LifecycleEvent) -> List[HostMessage]:
        return [m for m in self.messages if m.event == event]


class FakeViewport(Viewport):
    """Viewport whose scroll animation takes its full duration on the clock."""

    def __init__(self, scheduler: VirtualClockScheduler, content_height: int = 0):
        self.scheduler = scheduler
        self.content_height = content_height
        self.scrolled_to_top = 0
        self.scrolls = 0

    def get_content_height(self) -> int:
        return self.content_height

    def scroll_to_top(self) -> None:
        self.scrolled_to_top += 1

    def scroll_to_latest(self, duration: float, on_done) -> None:
        self.scrolls += 1
        self.scheduler.call_later(duration, on_done)
