"""Host channels that carry lifecycle messages to the embedding page."""

import logging
from collections import deque
from typing import Deque, List, Optional

from core.conversation.interfaces import HostChannel
from models.schemas import HostMessage

logger = logging.getLogger(__name__)


class LoggingHostChannel(HostChannel):
    """Logs every message. Useful when the player is not embedded."""

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level

    def send(self, message: HostMessage) -> None:
        logger.log(
            self.log_level,
            f"Host message: {message.event.value}",
            extra={"payload": message.payload()}
        )


class BufferedHostChannel(HostChannel):
    """Queues messages until the embedding page polls for them"""

    def __init__(self, max_messages: Optional[int] = 1000):
        self.messages: Deque[HostMessage] = deque(maxlen=max_messages)

    def send(self, message: HostMessage) -> None:
        if self.messages.maxlen and len(self.messages) == self.messages.maxlen:
            logger.warning(f"Host message buffer full, dropping oldest ({self.messages.maxlen})")
        self.messages.append(message)

    def drain(self) -> List[HostMessage]:
        """Return and clear all queued messages"""
        drained = list(self.messages)
        self.messages.clear()
        return drained


def send_to_host(channel: HostChannel, message: HostMessage) -> bool:
    """
    Deliver a message without letting delivery failures reach the caller.

    Returns:
        True if the channel accepted the message
    """
    try:
        channel.send(message)
        return True
    except Exception as e:
        logger.error(
            f"Host channel failed to send {message.event.value}: {str(e)}",
            extra={"error_type": type(e).__name__},
            exc_info=True
        )
        return False
