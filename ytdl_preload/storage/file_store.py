"""
Local filesystem implementation of the FileStore interface

Deletion is best-effort everywhere: a file that is locked (Windows, or a
player still holding it open) is reported and skipped, never raised.
"""

from pathlib import Path

from ..preload.interfaces import FileStore
from ..utils.helpers import ensure_directory
from ..utils.logger import get_logger


class LocalFileStore(FileStore):
    """FileStore backed by pathlib"""

    def __init__(self):
        self.logger = get_logger(__name__)

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def delete(self, path: str) -> bool:
        try:
            Path(path).unlink()
            return True
        except FileNotFoundError:
            self.logger.debug(f"Already gone: {path}")
            return False
        except OSError as e:
            self.logger.warning(f"Failed to delete {path}: {e}")
            return False

    def ensure_dir(self, path: str) -> None:
        try:
            ensure_directory(Path(path).expanduser())
        except OSError as e:
            self.logger.warning(f"Failed to create directory {path}: {e}")

    def delete_by_pattern(self, directory: str, pattern: str) -> int:
        base = Path(directory).expanduser()
        if not base.is_dir():
            return 0

        deleted = 0
        for file_path in base.glob(pattern):
            if file_path.is_file() and self.delete(str(file_path)):
                self.logger.debug(f"Cleaned up cache file: {file_path.name}")
                deleted += 1
        return deleted
