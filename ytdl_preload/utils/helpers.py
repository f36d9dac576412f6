"""
Utility functions and helpers for ytdl-preload
Common functions for path handling and playlist entry inspection
"""

from pathlib import Path
from typing import Optional, Union


REMOTE_SCHEME_MARKER = "://"


def is_remote_reference(value: Optional[str]) -> bool:
    """
    Check whether a playlist entry points at remote content

    Any entry carrying a URL scheme separator counts as remote; local
    paths (including Windows drive paths) do not.

    Args:
        value: Playlist entry value

    Returns:
        True if the entry is a remote reference
    """
    return bool(value) and REMOTE_SCHEME_MARKER in value


def normalize_path(path: Optional[Union[str, Path]]) -> str:
    """
    Normalize path separators for comparison

    mpv reports paths exactly as they were loaded, so the same file may
    appear with backslashes on one side and forward slashes on the other.

    Args:
        path: Path string or Path object (None is treated as empty)

    Returns:
        Path string using forward slashes only
    """
    if path is None:
        return ""
    return str(path).replace("\\", "/")


def same_path(first: Optional[Union[str, Path]], second: Optional[Union[str, Path]]) -> bool:
    """Compare two paths after separator normalization; empty paths never match"""
    first_norm = normalize_path(first)
    return bool(first_norm) and first_norm == normalize_path(second)


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable string

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes < 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    truncate_length = max_length - len(suffix)
    if truncate_length <= 0:
        return suffix[:max_length]

    return text[:truncate_length] + suffix
