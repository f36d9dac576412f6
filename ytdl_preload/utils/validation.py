"""
Input validation utilities
"""
import os
import re
from typing import Any, Optional, Tuple


def validate_preload_limit(limit: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate the lookahead / cache size limit

    Args:
        limit: Value to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return False, f"Preload limit must be a whole number, got: {limit!r}"

    if value < 1:
        return False, f"Preload limit must be at least 1, got: {value}"

    if value > 100:
        return False, f"Preload limit is unreasonably large: {value} (max 100)"

    return True, None


def validate_format_selector(selector: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a yt-dlp format selector string

    Only catches obvious mistakes; yt-dlp itself decides what is available.

    Args:
        selector: Format selector (e.g. "bestvideo+bestaudio/best")

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not selector or not selector.strip():
        return False, "Format selector cannot be empty"

    if re.search(r'\s', selector.strip()):
        return False, f"Format selector must not contain whitespace: {selector!r}"

    if selector.count('[') != selector.count(']'):
        return False, f"Unbalanced brackets in format selector: {selector!r}"

    return True, None


def validate_trusted_domains(domains: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate the trusted domain allowlist

    Args:
        domains: List of domain strings

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(domains, (list, tuple)):
        return False, "Trusted domains must be a list"

    for domain in domains:
        if not isinstance(domain, str) or not domain.strip():
            return False, f"Invalid trusted domain entry: {domain!r}"
        if '://' in domain or '/' in domain:
            return False, f"Trusted domain must be a bare host name: {domain!r}"

    return True, None


def validate_socket_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate mpv IPC socket path

    Args:
        path: Socket path from --input-ipc-server

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path:
        return False, "mpv socket path cannot be empty"

    if os.name == 'nt':
        return False, "Only UNIX domain sockets are supported for mpv IPC"

    return True, None
