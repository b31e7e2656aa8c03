"""
Coroutine-based collaborators.

The controller talks to its collaborators through callbacks. These base
classes let a provider or evaluator be written as coroutines instead; the
coroutine runs as a task on the running event loop and its outcome is routed
to the matching callback.
"""

import asyncio
import logging
from abc import abstractmethod
from typing import Any, Callable, Set

from core.conversation.interfaces import AnswerEvaluator, ErrorCallback, InteractionProvider
from models.schemas import InitialState, TransitionResult

logger = logging.getLogger(__name__)


def _run_task(coro, on_result: Callable[[Any], None], on_error: ErrorCallback,
              tasks: Set[asyncio.Task]) -> asyncio.Task:
    task = asyncio.get_running_loop().create_task(coro)
    # Keep a reference until the task is done
    tasks.add(task)

    def done(finished: asyncio.Task):
        tasks.discard(finished)
        if finished.cancelled():
            on_error(RuntimeError("Collaborator task was cancelled"))
            return
        error = finished.exception()
        if error is not None:
            on_error(error)
        else:
            on_result(finished.result())

    task.add_done_callback(done)
    return task


class AsyncInteractionProvider(InteractionProvider):
    """Interaction provider whose initial load is a coroutine"""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @abstractmethod
    async def load_initial_state(self) -> InitialState:
        pass

    def init(self, on_ready: Callable[[InitialState], None], on_error: ErrorCallback) -> None:
        _run_task(self.load_initial_state(), on_ready, on_error, self._tasks)


class AsyncAnswerEvaluator(AnswerEvaluator):
    """Answer evaluator whose grading is a coroutine"""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @abstractmethod
    async def evaluate(self, answer: Any, handler_id: str) -> TransitionResult:
        pass

    def submit(self, answer: Any, handler_id: str,
               on_result: Callable[[TransitionResult], None],
               on_error: ErrorCallback) -> None:
        logger.debug(f"Scheduling evaluation with handler {handler_id}")
        _run_task(self.evaluate(answer, handler_id), on_result, on_error, self._tasks)
