"""Integration of the conversation player with its hosts"""

from .adapter import PlayerAdapter
from .async_collaborators import AsyncInteractionProvider, AsyncAnswerEvaluator

__all__ = [
    'PlayerAdapter',
    'AsyncInteractionProvider',
    'AsyncAnswerEvaluator',
]
