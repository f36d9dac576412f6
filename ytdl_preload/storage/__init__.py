"""Filesystem access for the preload cache"""

from .file_store import LocalFileStore

__all__ = ['LocalFileStore']
