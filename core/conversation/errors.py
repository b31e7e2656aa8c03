"""
Recoverable failures of the conversation player.

Each error carries a kind from ``ConversationErrorKind`` so the controller can
record it on the session and let the learner retry.
"""

from typing import Optional

from models.schemas import ConversationErrorKind, SessionError


class ConversationError(Exception):
    """Base class for player failures"""

    kind: ConversationErrorKind = ConversationErrorKind.ANSWER_SUBMISSION_FAILED

    def __init__(self, message: str, state_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.state_id = state_id

    def to_session_error(self) -> SessionError:
        return SessionError(kind=self.kind, message=self.message, state_id=self.state_id)


class InteractionLoadFailed(ConversationError):
    """The interaction provider could not deliver the initial state"""

    kind = ConversationErrorKind.INTERACTION_LOAD_FAILED


class AnswerSubmissionFailed(ConversationError):
    """The evaluator rejected or failed to process an answer"""

    kind = ConversationErrorKind.ANSWER_SUBMISSION_FAILED


class EvaluationTimeout(ConversationError):
    """The evaluator did not resolve within EVALUATION_TIMEOUT"""

    kind = ConversationErrorKind.TIMEOUT
