"""
Conversation controller that drives the card-by-card player.

This module owns the learner's session: the ordered card history, the
in-flight answer guard, and the staged transitions that turn an evaluator
result into feedback and new cards.
"""

import logging
from typing import Any, Callable, Optional

from config import Settings, settings as default_settings
from core.conversation.errors import (
    AnswerSubmissionFailed,
    ConversationError,
    EvaluationTimeout,
    InteractionLoadFailed,
)
from core.conversation.interfaces import AnswerEvaluator, HostChannel, InteractionProvider, Viewport
from core.conversation.pipeline import Scheduler, TransitionPipeline
from core.conversation.presentation import HeightSettler, send_to_host
from models.schemas import (
    AnswerFeedbackPair,
    Card,
    ConversationSession,
    HostMessage,
    InitialState,
    LifecycleEvent,
    TransitionResult,
)

logger = logging.getLogger(__name__)


class ConversationController:
    """
    Controls the conversation by serializing answers into card updates.

    Only one answer is processed at a time. ``is_answer_in_flight`` is set in
    the same call that checks it and cleared only after every card and pair
    change for that answer has been applied.
    """

    def __init__(self, provider: InteractionProvider, evaluator: AnswerEvaluator,
                 host_channel: HostChannel, viewport: Viewport, scheduler: Scheduler,
                 settings: Optional[Settings] = None):
        self.provider = provider
        self.evaluator = evaluator
        self.host_channel = host_channel
        self.viewport = viewport
        self.scheduler = scheduler
        self.settings = settings or default_settings
        self.settler = HeightSettler(viewport, host_channel, scheduler, self.settings)

        self.session = ConversationSession()
        self.is_in_preview_mode = provider.is_in_preview_mode()

        self._generation = 0
        self._submission_count = 0
        self._pending_submission: Optional[int] = None
        self._timeout_call = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self):
        """Reset the session and load the exploration's initial state"""
        self._generation += 1
        generation = self._generation
        self._release_submission()
        self.session.reset(loading_message=self.settings.LOADING_MESSAGE)

        logger.info("Initializing conversation", extra={"generation": generation})
        try:
            self.provider.init(
                lambda initial: self._on_initial_state(generation, initial),
                lambda error: self._on_load_failed(generation, error)
            )
        except Exception as e:
            self._on_load_failed(generation, e)

    def _on_initial_state(self, generation: int, initial: InitialState):
        if not self._is_current(generation):
            logger.debug(f"Ignoring initial state from stale initialization {generation}")
            return

        # Nothing is announced to the host until every lookup has succeeded
        try:
            exploration_id = self.provider.get_exploration_id()
            exploration_title = self.provider.get_exploration_title()
            markup = self.provider.get_interaction_markup(initial.state_id)
            is_inline = self.provider.is_interaction_inline(initial.state_id)
        except Exception as e:
            self._on_load_failed(generation, e)
            return

        session = self.session
        session.exploration_id = exploration_id
        session.exploration_title = exploration_title
        session.has_interacted_once = False
        session.is_finished = False
        session.has_editing_rights = initial.has_editing_rights
        self._send(HostMessage(event=LifecycleEvent.EXPLORATION_LOADED))

        session.current_state_id = initial.state_id
        session.interaction_markup = markup
        session.interaction_is_inline = is_inline

        self.scheduler.call_later(
            self.settings.PAGE_SETTLE_DELAY,
            lambda: self._clear_loading_message(generation)
        )

        self.settler.settle(scroll=False)
        self.viewport.scroll_to_top()
        session.waiting_for_new_card = True

        def show_first_card():
            self._add_card(initial.state_id, initial.content)
            session.waiting_for_new_card = False

        (self._pipeline("first-card", generation)
            .wait(self.settings.FIRST_CARD_DELAY)
            .then(show_first_card)
            .then_async(self._scroll_step)
            .run())

        logger.info(
            f"Exploration loaded at state {initial.state_id}",
            extra={"exploration_id": session.exploration_id}
        )

    def _on_load_failed(self, generation: int, error: Exception):
        if not self._is_current(generation):
            return
        failure = error if isinstance(error, ConversationError) else InteractionLoadFailed(
            f"Could not load exploration: {str(error)}"
        )
        logger.error(
            f"Interaction load failed: {failure.message}",
            extra={"error_type": type(error).__name__}
        )
        self.session.loading_message = ""
        self.session.last_error = failure.to_session_error()

    def _clear_loading_message(self, generation: int):
        if self._is_current(generation):
            self.session.loading_message = ""

    # ------------------------------------------------------------------
    # Answer submission
    # ------------------------------------------------------------------

    def submit_answer(self, answer: Any, handler_id: str) -> bool:
        """
        Submit a learner answer.

        Args:
            answer: Collaborator-defined answer value
            handler_id: Grading entry point on the evaluator

        Returns:
            True if the answer was accepted, False if it was rejected
        """
        session = self.session
        if session.is_answer_in_flight:
            # Repeated UI triggers (e.g. double clicks) land here
            logger.info("Answer already being processed, ignoring submission")
            return False
        if not session.cards:
            logger.warning("Answer submitted before the first card was shown")
            return False
        if session.is_finished:
            logger.warning("Answer submitted after the exploration finished")
            return False

        try:
            learner_answer = self.provider.render_answer(answer)
        except Exception as e:
            failure = AnswerSubmissionFailed(
                f"Answer could not be rendered: {str(e)}",
                state_id=session.current_state_id
            )
            logger.error(
                f"Answer submission failed: {failure.message}",
                extra={"error_type": type(e).__name__, "handler_id": handler_id}
            )
            session.last_error = failure.to_session_error()
            return False

        session.is_answer_in_flight = True
        session.has_interacted_once = True
        session.last_error = None

        session.cards[-1].answer_feedback_pairs.append(AnswerFeedbackPair(learner_answer=learner_answer))
        session.waiting_for_feedback = True

        self._submission_count += 1
        submission_id = self._submission_count
        self._pending_submission = submission_id
        generation = self._generation

        if self.settings.EVALUATION_TIMEOUT is not None:
            self._timeout_call = self.scheduler.call_later(
                self.settings.EVALUATION_TIMEOUT,
                lambda: self._on_submission_failed(submission_id, EvaluationTimeout(
                    f"No evaluation after {self.settings.EVALUATION_TIMEOUT}s",
                    state_id=session.current_state_id
                ))
            )

        logger.info(
            f"Answer submitted at state {session.current_state_id}",
            extra={"submission_id": submission_id, "handler_id": handler_id}
        )

        try:
            self.evaluator.submit(
                answer, handler_id,
                lambda result: self._on_answer_evaluated(generation, submission_id, result),
                lambda error: self._on_submission_failed(submission_id, error)
            )
        except Exception as e:
            self._on_submission_failed(submission_id, e)

        return True

    def _on_answer_evaluated(self, generation: int, submission_id: int, result: TransitionResult):
        if not self._claim_submission(submission_id):
            logger.warning(f"Ignoring stale or duplicate evaluation for submission {submission_id}")
            return

        self.scheduler.call_later(
            self.settings.FEEDBACK_SETTLE_DELAY,
            lambda: self._apply_transition(generation, result)
        )

    def _on_submission_failed(self, submission_id: int, error: Exception):
        if not self._claim_submission(submission_id):
            logger.debug(f"Ignoring failure for settled submission {submission_id}")
            return

        session = self.session
        failure = error if isinstance(error, ConversationError) else AnswerSubmissionFailed(
            f"Answer could not be evaluated: {str(error)}",
            state_id=session.current_state_id
        )
        logger.error(
            f"Answer submission failed: {failure.message}",
            extra={"submission_id": submission_id, "kind": failure.kind.value}
        )

        card = session.last_card
        if card and card.answer_feedback_pairs and card.answer_feedback_pairs[-1].is_pending:
            card.answer_feedback_pairs.pop()
        session.waiting_for_feedback = False
        session.last_error = failure.to_session_error()
        session.is_answer_in_flight = False
        self.settler.settle(scroll=False)

    def _apply_transition(self, generation: int, result: TransitionResult):
        """Apply an evaluator result to the cards"""
        if not self._is_current(generation):
            return

        session = self.session
        old_state_id = session.current_state_id
        new_state_id = result.new_state_id or old_state_id
        session.current_state_id = new_state_id

        pair = session.pending_pair
        if pair is not None:
            pair.feedback = result.feedback

        if self.provider.is_terminal(new_state_id) and not session.is_finished:
            session.is_finished = True
            self._send(HostMessage(event=LifecycleEvent.EXPLORATION_COMPLETED))
            logger.info(f"Exploration completed at state {new_state_id}")

        if result.new_state_id and result.refresh_interaction:
            # The previous interaction is replaced; the render token forces a remount
            session.interaction_markup = (
                self.provider.get_interaction_markup(new_state_id) +
                self.provider.get_render_token()
            )
            session.interaction_is_inline = self.provider.is_interaction_inline(new_state_id)
            session.interaction_id = result.new_interaction_id

        pipeline = self._pipeline("answer-transition", generation)

        if old_state_id == new_state_id:
            pipeline.then(lambda: self._set_waiting(feedback=False))
            pipeline.then_async(self._scroll_step)
        elif result.feedback:
            pipeline.then(lambda: self._set_waiting(feedback=False, new_card=True))
            pipeline.then_async(self._scroll_step)
            pipeline.wait(self.settings.NEW_CARD_READ_DELAY)
            pipeline.then(lambda: self._set_waiting(new_card=False))
            pipeline.then(lambda: self._add_card(new_state_id, result.next_prompt))
            pipeline.then_async(self._scroll_step)
        else:
            pipeline.then(lambda: self._set_waiting(feedback=False))
            pipeline.then(lambda: self._add_card(new_state_id, result.next_prompt))
            pipeline.then_async(self._scroll_step)

        logger.info(
            f"Transition {old_state_id} -> {new_state_id}",
            extra={
                "has_feedback": bool(result.feedback),
                "refresh_interaction": result.refresh_interaction,
                "finished": session.is_finished
            }
        )
        pipeline.run(on_complete=self._finish_answer)

    def _finish_answer(self):
        self.session.is_answer_in_flight = False

    # ------------------------------------------------------------------
    # Other learner actions
    # ------------------------------------------------------------------

    def open_card_feedback(self, state_id: str) -> bool:
        """Open the feedback form for a card, unless in preview mode"""
        if self.is_in_preview_mode:
            warning = self.settings.PREVIEW_FEEDBACK_WARNING
            if warning not in self.session.warnings:
                self.session.warnings.append(warning)
            logger.warning(warning, extra={"state_id": state_id})
            return False
        self.provider.open_feedback_form(state_id)
        return True

    def before_unload(self) -> Optional[str]:
        """
        Check whether leaving now would lose progress.

        Returns:
            The leave warning, or None if the learner can leave freely
        """
        session = self.session
        if session.has_interacted_once and not session.is_finished and not self.is_in_preview_mode:
            self.provider.register_maybe_leave_event()
            return self.settings.LEAVE_WARNING_MESSAGE
        return None

    def on_resize(self):
        self.settler.settle(scroll=False)

    def snapshot(self) -> ConversationSession:
        """Deep copy of the session for presentation layers"""
        return self.session.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add_card(self, state_id: str, content: str):
        self.session.cards.append(Card(state_id=state_id, content=content))
        logger.debug(f"Card added for state {state_id} ({len(self.session.cards)} cards)")

    def _set_waiting(self, feedback: Optional[bool] = None, new_card: Optional[bool] = None):
        if feedback is not None:
            self.session.waiting_for_feedback = feedback
        if new_card is not None:
            self.session.waiting_for_new_card = new_card

    def _scroll_step(self, next_step: Callable[[], None]):
        self.settler.scroll_to_latest(next_step)

    def _pipeline(self, name: str, generation: int) -> TransitionPipeline:
        return TransitionPipeline(
            self.scheduler, name=name,
            guard=lambda: self._is_current(generation)
        )

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _claim_submission(self, submission_id: int) -> bool:
        """Take ownership of a submission's outcome, at most once"""
        if self._pending_submission != submission_id:
            return False
        self._release_submission()
        return True

    def _release_submission(self):
        self._pending_submission = None
        if self._timeout_call is not None:
            self._timeout_call.cancel()
            self._timeout_call = None

    def _send(self, message: HostMessage):
        send_to_host(self.host_channel, message)
