"""Presentation-side collaborators: height settling, host channels, viewports"""

from .height_settler import HeightSettler
from .host_channel import LoggingHostChannel, BufferedHostChannel, send_to_host
from .viewport import ReportedViewport

__all__ = [
    'HeightSettler',
    'LoggingHostChannel',
    'BufferedHostChannel',
    'send_to_host',
    'ReportedViewport',
]
