"""
Cache ledger: the ordered record of files the preloader has put on disk

Entries are evicted oldest-first once the ledger grows past its limit. The
file currently being played is a hard barrier: when it becomes the oldest
entry, eviction stops completely until playback moves on.
"""

import itertools
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from .interfaces import FileStore, Sequence
from ..utils.helpers import normalize_path, same_path
from ..utils.logger import get_logger


@dataclass
class CacheEntry:
    """One materialized file, in the order it was recorded"""
    path: str
    order: int
    added_at: float = field(default_factory=time.time)


class CacheLedger:
    """
    FIFO record of cached files with active-entry-guarded eviction

    The ledger owns the files it records: evicting an entry deletes the file
    and removes any playlist entry that still points at it.
    """

    def __init__(self, file_store: FileStore, sequence: Sequence):
        self.file_store = file_store
        self.sequence = sequence
        self.logger = get_logger(__name__)
        self._entries: Deque[CacheEntry] = deque()
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, path: str) -> CacheEntry:
        """Record a newly materialized (or deferred) file"""
        entry = CacheEntry(path=path, order=next(self._counter))
        self._entries.append(entry)
        self.logger.debug(f"Ledger +{path} (size {len(self._entries)})")
        return entry

    def oldest(self) -> Optional[CacheEntry]:
        return self._entries[0] if self._entries else None

    def paths(self) -> List[str]:
        return [entry.path for entry in self._entries]

    def evict(self, limit: int, active_path: Optional[str]) -> List[str]:
        """
        Evict oldest entries until the ledger is within limit

        Stops as soon as the oldest entry is the active file, even if younger
        entries could be evicted. A failed delete is logged and the entry is
        still dropped.

        Args:
            limit: Maximum number of entries to keep
            active_path: Path of the entry currently being played

        Returns:
            Paths evicted in this call, oldest first
        """
        evicted = []
        while len(self._entries) > limit:
            candidate = self._entries[0]

            if same_path(candidate.path, active_path):
                self.logger.info("Cache limit reached, but oldest file is playing. Skipping delete.")
                break

            self.logger.info(f"Deleting old file: {candidate.path}")
            if not self.file_store.delete(candidate.path):
                self.logger.warning(f"Could not delete cached file: {candidate.path}")

            self._remove_from_sequence(candidate.path)
            self._entries.popleft()
            evicted.append(candidate.path)

        return evicted

    def _remove_from_sequence(self, path: str) -> None:
        target = normalize_path(path)
        for index in range(self.sequence.length()):
            item = self.sequence.entry_at(index)
            if item is not None and normalize_path(item) == target:
                self.logger.info(f"Removing deleted file from playlist index: {index}")
                self.sequence.remove_at(index)
                return

    def clear(self) -> None:
        """Forget every entry without touching the files"""
        self._entries.clear()
