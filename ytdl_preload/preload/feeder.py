"""
Queue feeder: finds remote references in the lookahead window
"""

from typing import Deque, List, Set

from .interfaces import Sequence
from ..utils.helpers import is_remote_reference
from ..utils.logger import get_logger


class QueueFeeder:
    """
    Scans the entries after the active one and queues unseen remote references

    The task queue and pending set are shared with the scheduler; the
    feeder only ever appends to them.
    """

    def __init__(
        self,
        sequence: Sequence,
        task_queue: Deque[str],
        pending: Set[str],
        lookahead: int
    ):
        self.sequence = sequence
        self.task_queue = task_queue
        self.pending = pending
        self.lookahead = lookahead
        self.logger = get_logger(__name__)

    def window(self) -> range:
        """Indices eligible for prefetch given the current playlist state"""
        count = self.sequence.length()
        if not count:
            return range(0)

        current = self.sequence.active_position()
        # Nothing playing yet counts as sitting on the first entry
        if current is None or current < 0:
            current = 0

        last = min(current + self.lookahead, count - 1)
        return range(current + 1, last + 1)

    def scan(self) -> List[str]:
        """
        Queue every remote reference in the window that is not already pending

        Returns:
            References queued by this call, in playlist order
        """
        queued = []
        for index in self.window():
            reference = self.sequence.entry_at(index)
            if not is_remote_reference(reference) or reference in self.pending:
                continue

            self.logger.info(f"Adding to queue: {reference}")
            self.task_queue.append(reference)
            self.pending.add(reference)
            queued.append(reference)

        return queued
