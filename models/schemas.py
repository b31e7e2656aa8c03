"""Data models for the conversation player"""
from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum
from datetime import datetime


class LifecycleEvent(str, Enum):
    """Events sent to the embedding page"""
    EXPLORATION_LOADED = "explorationLoaded"
    EXPLORATION_COMPLETED = "explorationCompleted"
    HEIGHT_CHANGE = "heightChange"


class ConversationErrorKind(str, Enum):
    """Recoverable failure kinds surfaced on the session"""
    INTERACTION_LOAD_FAILED = "interaction_load_failed"
    ANSWER_SUBMISSION_FAILED = "answer_submission_failed"
    TIMEOUT = "timeout"


class AnswerFeedbackPair(BaseModel):
    """One learner answer and the feedback it received.

    ``feedback`` is None while the answer is being evaluated. A resolved
    answer with no feedback carries the empty string.
    """
    learner_answer: str
    feedback: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.feedback is None


class Card(BaseModel):
    """A state's prompt with the exchanges that happened while it was current"""
    state_id: str
    content: str = ""
    answer_feedback_pairs: List[AnswerFeedbackPair] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class SessionError(BaseModel):
    """Last recoverable failure"""
    kind: ConversationErrorKind
    message: str
    state_id: Optional[str] = None
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


class ConversationSession(BaseModel):
    """State of the single learner session owned by a controller"""
    cards: List[Card] = Field(default_factory=list)
    current_state_id: Optional[str] = None
    is_finished: bool = False
    is_answer_in_flight: bool = False
    has_interacted_once: bool = False

    # Presentation flags
    waiting_for_feedback: bool = False
    waiting_for_new_card: bool = False
    loading_message: str = ""

    # Active interaction
    interaction_markup: str = ""
    interaction_is_inline: bool = False
    interaction_id: Optional[str] = None

    # Exploration metadata
    exploration_id: Optional[str] = None
    exploration_title: Optional[str] = None
    has_editing_rights: bool = False

    warnings: List[str] = Field(default_factory=list)
    last_error: Optional[SessionError] = None

    @property
    def last_card(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    @property
    def pending_pair(self) -> Optional[AnswerFeedbackPair]:
        """The pair awaiting feedback, if any"""
        card = self.last_card
        if card and card.answer_feedback_pairs and card.answer_feedback_pairs[-1].is_pending:
            return card.answer_feedback_pairs[-1]
        return None

    def reset(self, loading_message: str = ""):
        """Reset in place for a fresh initialization"""
        self.cards = []
        self.current_state_id = None
        self.is_finished = False
        self.is_answer_in_flight = False
        self.has_interacted_once = False
        self.waiting_for_feedback = False
        self.waiting_for_new_card = False
        self.loading_message = loading_message
        self.interaction_markup = ""
        self.interaction_is_inline = False
        self.interaction_id = None
        self.warnings = []
        self.last_error = None


class InitialState(BaseModel):
    """Initial state delivered by the interaction provider"""
    state_id: str
    content: str = ""
    has_editing_rights: bool = False


class TransitionResult(BaseModel):
    """Outcome of evaluating one answer"""
    new_state_id: Optional[str] = None
    refresh_interaction: bool = False
    feedback: str = ""
    next_prompt: str = ""
    new_interaction_id: Optional[str] = None


class HostMessage(BaseModel):
    """A lifecycle message for the embedding page"""
    event: LifecycleEvent
    height: Optional[int] = None
    scroll: Optional[bool] = None
    sent_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def height_change(cls, height: int, scroll: bool) -> "HostMessage":
        return cls(event=LifecycleEvent.HEIGHT_CHANGE, height=height, scroll=scroll)

    def payload(self) -> Optional[dict]:
        if self.event == LifecycleEvent.HEIGHT_CHANGE:
            return {"height": self.height, "scroll": self.scroll}
        return None
