"""End-to-end runs on a real event loop with coroutine collaborators."""

import asyncio

from config import Settings
from core.conversation.integration import AsyncAnswerEvaluator, AsyncInteractionProvider
from core.conversation.orchestration import ConversationController
from core.conversation.pipeline import AsyncioScheduler
from core.conversation.presentation import ReportedViewport
from models.schemas import ConversationErrorKind, InitialState, LifecycleEvent, TransitionResult

from fakes import RecordingHostChannel

FAST = dict(
    PAGE_SETTLE_DELAY=0.0,
    FIRST_CARD_DELAY=0.01,
    FEEDBACK_SETTLE_DELAY=0.01,
    NEW_CARD_READ_DELAY=0.01,
    HEIGHT_MEASURE_DELAY=0.0,
    SCROLL_DURATION=0.0,
)


class QuizProvider(AsyncInteractionProvider):
    async def load_initial_state(self) -> InitialState:
        await asyncio.sleep(0)
        return InitialState(state_id="Q1", content="Capital of France?")

    def get_interaction_markup(self, state_id):
        return f"<text-input id='{state_id}'>"

    def is_interaction_inline(self, state_id):
        return True

    def is_terminal(self, state_id):
        return state_id == "END"

    def get_render_token(self):
        return "#token"

    def render_answer(self, answer):
        return str(answer)


class BrokenProvider(QuizProvider):
    async def load_initial_state(self) -> InitialState:
        raise IOError("exploration missing")


class QuizEvaluator(AsyncAnswerEvaluator):
    def __init__(self):
        super().__init__()
        self.calls = 0

    async def evaluate(self, answer, handler_id) -> TransitionResult:
        self.calls += 1
        await asyncio.sleep(0.01)
        if handler_id == "broken":
            raise ValueError("no such handler")
        if answer == "Paris":
            return TransitionResult(new_state_id="END", feedback="Correct!", next_prompt="Well done.")
        return TransitionResult(new_state_id="Q1", feedback="Not quite.")


async def wait_for(predicate, timeout: float = 2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


def build(provider, evaluator, host):
    scheduler = AsyncioScheduler()
    settings = Settings(_env_file=None, **FAST)
    return ConversationController(
        provider, evaluator, host, ReportedViewport(scheduler, 200), scheduler, settings
    )


def test_full_conversation_on_event_loop():
    host = RecordingHostChannel()
    evaluator = QuizEvaluator()

    async def scenario():
        controller = build(QuizProvider(), evaluator, host)
        controller.initialize()
        await wait_for(lambda: len(controller.session.cards) == 1)

        assert controller.submit_answer("Lyon", "submit") is True
        assert controller.submit_answer("Lyon", "submit") is False
        await wait_for(lambda: not controller.session.is_answer_in_flight)

        controller.submit_answer("Paris", "submit")
        await wait_for(lambda: not controller.session.is_answer_in_flight)
        return controller.snapshot()

    session = asyncio.run(scenario())

    assert evaluator.calls == 2
    assert [card.state_id for card in session.cards] == ["Q1", "END"]
    assert [p.feedback for p in session.cards[0].answer_feedback_pairs] == ["Not quite.", "Correct!"]
    assert session.is_finished is True
    assert len(host.events(LifecycleEvent.EXPLORATION_COMPLETED)) == 1


def test_evaluation_error_routed_to_controller():
    host = RecordingHostChannel()

    async def scenario():
        controller = build(QuizProvider(), QuizEvaluator(), host)
        controller.initialize()
        await wait_for(lambda: len(controller.session.cards) == 1)
        controller.submit_answer("Paris", "broken")
        await wait_for(lambda: controller.session.last_error is not None)
        return controller.snapshot()

    session = asyncio.run(scenario())
    assert session.last_error.kind == ConversationErrorKind.ANSWER_SUBMISSION_FAILED
    assert session.is_answer_in_flight is False
    assert session.cards[0].answer_feedback_pairs == []


def test_load_error_routed_to_controller():
    host = RecordingHostChannel()

    async def scenario():
        controller = build(BrokenProvider(), QuizEvaluator(), host)
        controller.initialize()
        await wait_for(lambda: controller.session.last_error is not None)
        return controller.snapshot()

    session = asyncio.run(scenario())
    assert session.last_error.kind == ConversationErrorKind.INTERACTION_LOAD_FAILED
    assert host.events(LifecycleEvent.EXPLORATION_LOADED) == []


class MarkupMissingProvider(QuizProvider):
    def get_interaction_markup(self, state_id):
        raise KeyError(state_id)


def test_lookup_error_after_load_routed_to_controller():
    host = RecordingHostChannel()

    async def scenario():
        controller = build(MarkupMissingProvider(), QuizEvaluator(), host)
        controller.initialize()
        await wait_for(lambda: controller.session.last_error is not None)
        return controller.snapshot()

    session = asyncio.run(scenario())
    assert session.last_error.kind == ConversationErrorKind.INTERACTION_LOAD_FAILED
    assert session.loading_message == ""
    assert session.cards == []
    assert host.events(LifecycleEvent.EXPLORATION_LOADED) == []
