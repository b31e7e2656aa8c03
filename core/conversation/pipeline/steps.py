"""
Staged transitions for the conversation pipeline.

A ``TransitionPipeline`` is a short chain of steps run one after another.
Each step receives the continuation that starts the next step, so immediate
actions, fixed waits and callback-style work (such as a scroll settling) can
be mixed without nesting callbacks.
"""

import logging
from typing import Callable, List, Optional

from .scheduler import Scheduler

logger = logging.getLogger(__name__)

Continuation = Callable[[], None]
Step = Callable[[Continuation], None]


class TransitionPipeline:
    """Builds and runs a chain of delayed actions"""

    def __init__(self, scheduler: Scheduler, name: str = "transition",
                 guard: Optional[Callable[[], bool]] = None):
        """
        Args:
            scheduler: Timer source for ``wait`` steps
            name: Used in log messages
            guard: Checked before every step; the chain stops once it is false
        """
        self.scheduler = scheduler
        self.name = name
        self.guard = guard
        self.steps: List[Step] = []

    def then(self, action: Callable[[], None]) -> 'TransitionPipeline':
        """Run action immediately, then continue"""
        def step(next_step: Continuation):
            action()
            next_step()
        self.steps.append(step)
        return self

    def wait(self, delay: float) -> 'TransitionPipeline':
        """Continue after delay seconds"""
        def step(next_step: Continuation):
            self.scheduler.call_later(delay, next_step)
        self.steps.append(step)
        return self

    def then_async(self, step: Step) -> 'TransitionPipeline':
        """Add a step that calls its continuation itself"""
        self.steps.append(step)
        return self

    def build(self, on_complete: Optional[Callable[[], None]] = None) -> Continuation:
        """Build the step chain"""
        def create_handler(step: Step, next_handler: Continuation) -> Continuation:
            def handler():
                if self.guard is not None and not self.guard():
                    logger.debug(f"Pipeline '{self.name}' stopped by guard")
                    return
                step(next_handler)
            return handler

        def finish():
            if self.guard is not None and not self.guard():
                return
            if on_complete:
                on_complete()

        # Build chain in reverse order
        handler = finish
        for step in reversed(self.steps):
            handler = create_handler(step, handler)

        return handler

    def run(self, on_complete: Optional[Callable[[], None]] = None):
        """Start the chain"""
        logger.debug(f"Running pipeline '{self.name}' with {len(self.steps)} steps")
        self.build(on_complete)()

    def clear(self):
        """Remove all steps"""
        self.steps = []
