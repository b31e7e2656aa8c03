"""Conversation orchestration components"""

from .controller import ConversationController

__all__ = [
    'ConversationController',
]
