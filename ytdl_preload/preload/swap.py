"""
Swap coordinator: puts a downloaded file in place of its remote entry

The playlist may have changed in any way between queueing a reference and
its download finishing, so the entry is always located again by value right
before mutating. Indices captured earlier are never reused.
"""

from enum import Enum
from typing import Optional

from .interfaces import Notifier, Sequence
from .ledger import CacheLedger
from ..utils.logger import get_logger


class SwapOutcome(Enum):
    """What happened to a finished download"""
    SWAPPED = "swapped"
    DEFERRED_ACTIVE = "deferred_active"
    NOT_FOUND = "not_found"


def find_entry(sequence: Sequence, value: str) -> Optional[int]:
    """Index of the first entry equal to value in the current playlist, or None"""
    for index in range(sequence.length()):
        if sequence.entry_at(index) == value:
            return index
    return None


class SwapCoordinator:
    """
    Substitutes local files for remote references

    Every outcome records the local file in the ledger, so nothing the
    preloader downloaded is ever left on disk without an owner.
    """

    def __init__(self, sequence: Sequence, ledger: CacheLedger, notifier: Notifier):
        self.sequence = sequence
        self.ledger = ledger
        self.notifier = notifier
        self.logger = get_logger(__name__)

    def swap(self, reference: str, local_path: str) -> SwapOutcome:
        """
        Replace the entry holding reference with local_path

        Args:
            reference: Original remote URL
            local_path: Downloaded file for that URL

        Returns:
            SwapOutcome describing what was done
        """
        target_index = find_entry(self.sequence, reference)

        if target_index is None:
            self.logger.info(f"Could not find URL in playlist to swap: {reference}")
            self.ledger.append(local_path)
            return SwapOutcome.NOT_FOUND

        if target_index == self.sequence.active_position():
            # Replacing the playing entry would restart playback
            self.logger.info(f"Video is currently playing, skipping swap: {reference}")
            self.ledger.append(local_path)
            return SwapOutcome.DEFERRED_ACTIVE

        self.logger.info(f"Swapping index {target_index} with local file.")
        count = self.sequence.length()
        self.sequence.insert_at(count, local_path)
        self.sequence.move_entry(count, target_index)
        # The original entry was pushed one slot down by the move
        self.sequence.remove_at(target_index + 1)

        self.ledger.append(local_path)
        self.notifier.info(f"Preloaded: Video {target_index + 1}")
        return SwapOutcome.SWAPPED
