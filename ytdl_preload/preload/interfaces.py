"""
Collaborator interfaces for the preload core

The core never talks to mpv, yt-dlp or the filesystem directly. It goes
through these four interfaces so tests can substitute in-memory fakes and
the runtime can plug in the real implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(frozen=True)
class FetchRequest:
    """
    Everything a fetcher needs to materialize one remote reference

    Attributes:
        reference: Remote URL to download
        destination: Exact output file path
        format_selector: yt-dlp format selector
        extra_options: Up to two passthrough command line options
        relaxed_extension: Allow output extensions yt-dlp considers unsafe
    """
    reference: str
    destination: str
    format_selector: str
    extra_options: List[str] = field(default_factory=list)
    relaxed_extension: bool = False


@dataclass(frozen=True)
class FetchResult:
    """Outcome reported by a fetcher when a request finishes"""
    success: bool
    exit_status: Optional[int] = None
    error_message: Optional[str] = None


FetchCallback = Callable[[FetchResult], None]


class Sequence(ABC):
    """
    The host playlist, as seen by the preloader

    Indices are zero-based. Values are either remote references or local
    file paths exactly as the host reports them.
    """

    @abstractmethod
    def length(self) -> int:
        """Number of entries, 0 when unknown"""

    @abstractmethod
    def active_position(self) -> Optional[int]:
        """Index of the entry being played, None when nothing is active"""

    @abstractmethod
    def active_path(self) -> Optional[str]:
        """Path or URL of the entry being played"""

    @abstractmethod
    def entry_at(self, index: int) -> Optional[str]:
        """Value of the entry at index, None if it cannot be read"""

    @abstractmethod
    def insert_at(self, index: int, value: str) -> None:
        """Insert value so it ends up at index; index == length() appends"""

    @abstractmethod
    def move_entry(self, from_index: int, to_index: int) -> None:
        """Move the entry at from_index so it sits before the entry now at to_index"""

    @abstractmethod
    def remove_at(self, index: int) -> None:
        """Remove the entry at index"""


class Fetcher(ABC):
    """Asynchronous materialization of a remote reference into a local file"""

    @abstractmethod
    def fetch_async(self, request: FetchRequest, callback: FetchCallback) -> None:
        """
        Start fetching and return immediately

        The callback is invoked exactly once, on the preloader's execution
        context, when the fetch finishes (successfully or not).
        """


class FileStore(ABC):
    """Filesystem operations used by the preloader"""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True if a file exists at path"""

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Best-effort delete; returns False instead of raising on failure"""

    @abstractmethod
    def ensure_dir(self, path: str) -> None:
        """Create the directory (and parents) if needed"""

    @abstractmethod
    def delete_by_pattern(self, directory: str, pattern: str) -> int:
        """Delete every file in directory matching a glob pattern; returns count deleted"""


class Notifier(ABC):
    """User-visible status messages (fire-and-forget)"""

    @abstractmethod
    def info(self, message: str) -> None:
        """Show a status message"""
