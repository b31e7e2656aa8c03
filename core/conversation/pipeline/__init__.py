"""Timers and staged transitions for the conversation player"""

from .scheduler import (
    Scheduler,
    ScheduledCall,
    AsyncioScheduler,
    VirtualClockScheduler,
)
from .steps import TransitionPipeline, Step, Continuation

__all__ = [
    'Scheduler',
    'ScheduledCall',
    'AsyncioScheduler',
    'VirtualClockScheduler',
    'TransitionPipeline',
    'Step',
    'Continuation',
]
