"""
Preload coordinator: owns all preload state and reacts to player events

One coordinator instance holds the task queue, pending set, worker state and
cache ledger for a single player. Every method must be called from the same
execution context (the runtime event loop); none of them blocks on a download.
"""

from dataclasses import dataclass, field
from typing import List

from .feeder import QueueFeeder
from .interfaces import Fetcher, FileStore, Notifier, Sequence
from .keys import KeyDeriver
from .ledger import CacheLedger
from .scheduler import Scheduler
from .swap import SwapCoordinator
from .task import MaterializationTask
from .trust import TrustPolicy
from ..config.settings import DEFAULT_PRELOAD_LIMIT, DEFAULT_TRUSTED_DOMAINS
from ..utils.logger import get_logger


@dataclass
class PreloadOptions:
    """
    The configuration the core reads once at startup

    Attributes:
        cache_dir: Directory downloaded files are written to
        format_selector: yt-dlp format selector
        extra_options: Passthrough yt-dlp options (empty strings are dropped)
        limit: Lookahead window size and cache ledger limit
        trusted_domains: Domains allowed relaxed extensions
        extension: Cache file extension
    """
    cache_dir: str
    format_selector: str = "bestvideo+bestaudio/best"
    extra_options: List[str] = field(default_factory=list)
    limit: int = DEFAULT_PRELOAD_LIMIT
    trusted_domains: List[str] = field(default_factory=lambda: list(DEFAULT_TRUSTED_DOMAINS))
    extension: str = "mkv"

    def __post_init__(self):
        if not isinstance(self.limit, int) or self.limit < 1:
            self.limit = DEFAULT_PRELOAD_LIMIT

    @classmethod
    def from_settings(cls, settings) -> "PreloadOptions":
        return cls(
            cache_dir=str(settings.get_cache_directory()),
            format_selector=settings.preload.format,
            extra_options=settings.get_passthrough_options(),
            limit=settings.preload.preload_limit,
            trusted_domains=list(settings.preload.trusted_domains),
            extension=settings.preload.extension,
        )


class PreloadCoordinator:
    """
    Wires the feeder, scheduler, swap coordinator and ledger together

    Event entry points:
        on_file_started: the active entry changed (evict, then scan)
        on_position_changed / on_length_changed: rescan the window
        shutdown: delete every cache file, without waiting for a download
    """

    def __init__(
        self,
        sequence: Sequence,
        fetcher: Fetcher,
        file_store: FileStore,
        notifier: Notifier,
        options: PreloadOptions
    ):
        self.sequence = sequence
        self.file_store = file_store
        self.notifier = notifier
        self.options = options
        self.logger = get_logger(__name__)
        self.is_shut_down = False

        self.key_deriver = KeyDeriver(options.cache_dir, options.extension)
        self.trust_policy = TrustPolicy(options.trusted_domains)
        self.ledger = CacheLedger(file_store, sequence)
        self.swap_coordinator = SwapCoordinator(sequence, self.ledger, notifier)
        self.task = MaterializationTask(
            key_deriver=self.key_deriver,
            file_store=file_store,
            fetcher=fetcher,
            trust_policy=self.trust_policy,
            swap=self.swap_coordinator,
            notifier=notifier,
            format_selector=options.format_selector,
            extra_options=options.extra_options,
        )
        self.scheduler = Scheduler(self.task.run, after_task=self.evict)
        self.feeder = QueueFeeder(
            sequence,
            self.scheduler.task_queue,
            self.scheduler.pending,
            options.limit,
        )

        self.file_store.ensure_dir(options.cache_dir)

    def evict(self) -> List[str]:
        """Run one eviction cycle against the current active entry"""
        return self.ledger.evict(self.options.limit, self.sequence.active_path())

    def check_preload(self) -> List[str]:
        """Scan the lookahead window and kick the scheduler"""
        if self.is_shut_down:
            return []
        queued = self.feeder.scan()
        self.scheduler.try_advance()
        return queued

    def on_file_started(self) -> None:
        if self.is_shut_down:
            return
        self.evict()
        self.check_preload()

    def on_position_changed(self) -> None:
        self.check_preload()

    def on_length_changed(self) -> None:
        self.check_preload()

    def shutdown(self) -> int:
        """
        Delete every cache file in the cache directory

        An in-flight download is not cancelled or waited for.

        Returns:
            Number of files deleted
        """
        if self.is_shut_down:
            return 0
        self.is_shut_down = True

        if self.scheduler.busy:
            self.logger.info(f"Shutting down while downloading: {self.scheduler.current}")

        deleted = self.file_store.delete_by_pattern(self.options.cache_dir, self.key_deriver.pattern)
        self.ledger.clear()
        self.logger.info(f"Removed {deleted} cached file(s) from {self.options.cache_dir}")
        return deleted

    def status(self) -> dict:
        stats = self.scheduler.stats()
        stats['cached'] = len(self.ledger)
        return stats
