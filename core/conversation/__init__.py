"""
Core conversation player.

This package provides the card-by-card conversation player with:
- A controller that serializes answers into card and feedback updates
- Collaborator contracts for content, grading, hosting and viewport
- Schedulers and staged transition pipelines
- Height settling and host messaging
- Integration adapters for serving the player
"""

from .errors import (
    ConversationError,
    InteractionLoadFailed,
    AnswerSubmissionFailed,
    EvaluationTimeout,
)
from .interfaces import (
    InteractionProvider,
    AnswerEvaluator,
    HostChannel,
    Viewport,
)
from .pipeline import (
    Scheduler,
    AsyncioScheduler,
    VirtualClockScheduler,
    TransitionPipeline,
)
from .presentation import (
    HeightSettler,
    LoggingHostChannel,
    BufferedHostChannel,
    ReportedViewport,
)
from .orchestration import ConversationController
from .integration import (
    PlayerAdapter,
    AsyncInteractionProvider,
    AsyncAnswerEvaluator,
)

__all__ = [
    # Errors
    'ConversationError',
    'InteractionLoadFailed',
    'AnswerSubmissionFailed',
    'EvaluationTimeout',

    # Contracts
    'InteractionProvider',
    'AnswerEvaluator',
    'HostChannel',
    'Viewport',

    # Pipeline
    'Scheduler',
    'AsyncioScheduler',
    'VirtualClockScheduler',
    'TransitionPipeline',

    # Presentation
    'HeightSettler',
    'LoggingHostChannel',
    'BufferedHostChannel',
    'ReportedViewport',

    # Orchestration
    'ConversationController',

    # Integration
    'PlayerAdapter',
    'AsyncInteractionProvider',
    'AsyncAnswerEvaluator',
]
