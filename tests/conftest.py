"""Test configuration and fixtures"""

import fnmatch
import os
import pytest
import tempfile
from pathlib import Path
from typing import List, Optional

from ytdl_preload.config import settings as settings_module
from ytdl_preload.preload.coordinator import PreloadCoordinator, PreloadOptions
from ytdl_preload.preload.interfaces import (
    FetchRequest,
    FetchResult,
    Fetcher,
    FileStore,
    Notifier,
    Sequence,
)


ENV_VARS = (
    'YTDL_PRELOAD_TEMP',
    'YTDL_PRELOAD_FORMAT',
    'YTDL_PRELOAD_LIMIT',
    'YTDL_PRELOAD_SOCKET',
    'YTDL_PRELOAD_YTDLP',
)

CACHE_DIR = "/cache"


class FakeSequence(Sequence):
    """In-memory playlist that follows mpv's move/remove semantics"""

    def __init__(self, entries: Optional[List[str]] = None, position: Optional[int] = 0):
        self.entries = list(entries or [])
        self.position = position if self.entries else None

    def length(self) -> int:
        return len(self.entries)

    def active_position(self) -> Optional[int]:
        return self.position

    def active_path(self) -> Optional[str]:
        if self.position is None or self.position >= len(self.entries):
            return None
        return self.entries[self.position]

    def entry_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def insert_at(self, index: int, value: str) -> None:
        self.entries.insert(index, value)
        if self.position is not None and index <= self.position:
            self.position += 1

    def move_entry(self, from_index: int, to_index: int) -> None:
        playing = self.active_path()
        item = self.entries.pop(from_index)
        if from_index < to_index:
            to_index -= 1
        self.entries.insert(to_index, item)
        if playing is not None:
            self.position = self.entries.index(playing)

    def remove_at(self, index: int) -> None:
        del self.entries[index]
        if self.position is not None and index < self.position:
            self.position -= 1

    def play(self, index: int) -> None:
        self.position = index


class FakeFetcher(Fetcher):
    """Fetcher whose downloads finish only when the test says so"""

    def __init__(self, file_store: Optional["FakeFileStore"] = None):
        self.file_store = file_store
        self.requests: List[FetchRequest] = []
        self.outstanding = []
        self.max_outstanding = 0

    def fetch_async(self, request, callback) -> None:
        self.requests.append(request)
        self.outstanding.append((request, callback))
        self.max_outstanding = max(self.max_outstanding, len(self.outstanding))

    def complete(self, success: bool = True, exit_status: Optional[int] = None) -> FetchRequest:
        request, callback = self.outstanding.pop(0)
        if success and self.file_store is not None:
            self.file_store.files.add(request.destination)
        status = 0 if success else (exit_status if exit_status is not None else 1)
        callback(FetchResult(success=success, exit_status=status))
        return request

    @property
    def in_flight(self) -> List[str]:
        return [request.reference for request, _ in self.outstanding]


class FakeFileStore(FileStore):
    """Set of file paths standing in for the cache directory"""

    def __init__(self, files=None):
        self.files = set(files or [])
        self.undeletable = set()
        self.deleted: List[str] = []
        self.directories: List[str] = []

    def exists(self, path: str) -> bool:
        return path in self.files

    def delete(self, path: str) -> bool:
        if path in self.undeletable or path not in self.files:
            return False
        self.files.discard(path)
        self.deleted.append(path)
        return True

    def ensure_dir(self, path: str) -> None:
        self.directories.append(path)

    def delete_by_pattern(self, directory: str, pattern: str) -> int:
        count = 0
        for path in sorted(self.files):
            if os.path.dirname(path) == directory and fnmatch.fnmatch(os.path.basename(path), pattern):
                if self.delete(path):
                    count += 1
        return count


class RecordingNotifier(Notifier):
    def __init__(self):
        self.messages: List[str] = []

    def info(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep user config files and environment overrides out of every test"""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, 'home', lambda: home)
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, '_settings', None)
    yield home


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def file_store():
    return FakeFileStore()


@pytest.fixture
def fetcher(file_store):
    return FakeFetcher(file_store)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_coordinator(file_store, fetcher, notifier):
    """Build a coordinator over a FakeSequence holding the given entries"""

    def factory(entries, position=0, limit=5, **option_overrides):
        sequence = FakeSequence(entries, position)
        options = PreloadOptions(cache_dir=CACHE_DIR, limit=limit, **option_overrides)
        coordinator = PreloadCoordinator(sequence, fetcher, file_store, notifier, options)
        return coordinator, sequence

    return factory


def urls(count: int, start: int = 0) -> List[str]:
    return [f"https://www.youtube.com/watch?v=video{i}" for i in range(start, start + count)]
