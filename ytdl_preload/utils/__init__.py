"""
Utilities package
Common helpers, logging, and validation functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    get_current_log_file
)
from .helpers import (
    is_remote_reference,
    normalize_path,
    same_path,
    ensure_directory,
    format_file_size,
    truncate_string
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'get_current_log_file',

    # Helper exports
    'is_remote_reference',
    'normalize_path',
    'same_path',
    'ensure_directory',
    'format_file_size',
    'truncate_string',
]
