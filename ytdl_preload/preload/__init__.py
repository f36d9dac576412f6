"""
Preload core

Keeps the next few playlist entries downloaded, swaps remote entries for
their local files, and evicts files that fall behind playback. Everything
outside this package (mpv, yt-dlp, the filesystem) is reached through the
interfaces in `interfaces.py`.
"""

from .coordinator import PreloadCoordinator, PreloadOptions
from .feeder import QueueFeeder
from .interfaces import FetchRequest, FetchResult, Fetcher, FileStore, Notifier, Sequence
from .keys import KeyDeriver, derive_cache_filename, cache_file_pattern
from .ledger import CacheEntry, CacheLedger
from .scheduler import Scheduler, WorkerState
from .swap import SwapCoordinator, SwapOutcome
from .task import MaterializationTask
from .trust import TrustPolicy, is_trusted_reference

__all__ = [
    'PreloadCoordinator',
    'PreloadOptions',
    'QueueFeeder',
    'FetchRequest',
    'FetchResult',
    'Fetcher',
    'FileStore',
    'Notifier',
    'Sequence',
    'KeyDeriver',
    'derive_cache_filename',
    'cache_file_pattern',
    'CacheEntry',
    'CacheLedger',
    'Scheduler',
    'WorkerState',
    'SwapCoordinator',
    'SwapOutcome',
    'MaterializationTask',
    'TrustPolicy',
    'is_trusted_reference',
]
