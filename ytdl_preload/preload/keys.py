"""
Cache filename derivation

Every remote reference maps to one stable filename in the cache directory:

    preload-<length>-<fingerprint>.<ext>

where <length> is the character length of the reference and <fingerprint> is
a 64-bit BLAKE2b digest in hex. The same reference always yields the same
name, which is what lets the scheduler skip a download when the file is
already on disk.
"""

import hashlib
import os
from typing import Union
from pathlib import Path


CACHE_FILE_PREFIX = "preload"
FINGERPRINT_BYTES = 8


def reference_fingerprint(reference: str) -> str:
    """Return the 16-hex-digit fingerprint of a reference"""
    digest = hashlib.blake2b(reference.encode('utf-8'), digest_size=FINGERPRINT_BYTES)
    return digest.hexdigest()


def derive_cache_filename(reference: str, extension: str = "mkv") -> str:
    """
    Derive the cache filename for a remote reference

    Args:
        reference: Remote URL
        extension: File extension without the leading dot

    Returns:
        Filename such as "preload-43-9f0c1e2d3b4a5968.mkv"
    """
    return f"{CACHE_FILE_PREFIX}-{len(reference)}-{reference_fingerprint(reference)}.{extension}"


def cache_file_pattern(extension: str = "mkv") -> str:
    """Glob pattern matching every derived cache filename"""
    return f"{CACHE_FILE_PREFIX}-*.{extension}"


class KeyDeriver:
    """Maps references to full target paths inside one cache directory"""

    def __init__(self, directory: Union[str, Path], extension: str = "mkv"):
        self.directory = str(directory)
        self.extension = extension.lstrip('.')

    def filename(self, reference: str) -> str:
        return derive_cache_filename(reference, self.extension)

    def target_path(self, reference: str) -> str:
        return os.path.join(self.directory, self.filename(reference))

    @property
    def pattern(self) -> str:
        return cache_file_pattern(self.extension)
