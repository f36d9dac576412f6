"""
Serial scheduler for materialization tasks

At most one task runs at a time. That single outstanding job is the
backpressure policy and also what keeps playlist and ledger edits from two
downloads from ever interleaving.

Advancing is trampolined: a request to advance made while the scheduler is
already advancing (for example a task that completes synchronously because
its file was already cached) is recorded and picked up by the outer loop
instead of recursing.
"""

from collections import deque
from enum import Enum
from typing import Callable, Deque, Optional, Set

from ..utils.logger import get_logger


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"


TaskRunner = Callable[[str, Callable[[bool], None]], None]


class Scheduler:
    """
    Drains the task queue one reference at a time

    Args:
        runner: Starts the task for a reference; must eventually call the
                supplied done(success) callback exactly once
        after_task: Hook run after every task, before going idle (eviction)
    """

    def __init__(self, runner: TaskRunner, after_task: Optional[Callable[[], None]] = None):
        self.runner = runner
        self.after_task = after_task
        self.logger = get_logger(__name__)

        self.task_queue: Deque[str] = deque()
        self.pending: Set[str] = set()
        self.state = WorkerState.IDLE
        self.current: Optional[str] = None

        self.completed = 0
        self.failed = 0

        self._advancing = False
        self._advance_requested = False

    @property
    def busy(self) -> bool:
        return self.state is WorkerState.BUSY

    def try_advance(self) -> None:
        """Start the next queued task if the worker is idle"""
        self._advance_requested = True
        if self._advancing:
            return

        self._advancing = True
        try:
            while self._advance_requested:
                self._advance_requested = False
                self._advance_once()
        finally:
            self._advancing = False

    def _advance_once(self) -> None:
        if self.state is WorkerState.BUSY or not self.task_queue:
            return

        reference = self.task_queue.popleft()
        self.state = WorkerState.BUSY
        self.current = reference

        finished = False

        def done(success: bool) -> None:
            nonlocal finished
            if finished:
                self.logger.debug(f"Ignoring repeated completion for {reference}")
                return
            finished = True
            self._finish(reference, success)

        try:
            self.runner(reference, done)
        except Exception as e:
            self.logger.error(f"Task for {reference} raised: {e}", exc_info=True)
            done(False)

    def _finish(self, reference: str, success: bool) -> None:
        self.pending.discard(reference)
        if success:
            self.completed += 1
        else:
            self.failed += 1

        try:
            if self.after_task:
                self.after_task()
        finally:
            self.state = WorkerState.IDLE
            self.current = None
            self.try_advance()

    def stats(self) -> dict:
        return {
            'state': self.state.value,
            'current': self.current,
            'queued': len(self.task_queue),
            'completed': self.completed,
            'failed': self.failed,
        }
