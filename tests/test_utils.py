# tests/test_utils.py
"""Test utilities and helpers"""

import logging

import pytest

from ytdl_preload.storage.file_store import LocalFileStore
from ytdl_preload.utils.helpers import (
    ensure_directory,
    format_file_size,
    is_remote_reference,
    normalize_path,
    same_path,
    truncate_string,
)
from ytdl_preload.utils.logger import ColoredFormatter, ConsoleMessageFilter, parse_size
from ytdl_preload.utils.validation import (
    validate_format_selector,
    validate_preload_limit,
    validate_socket_path,
    validate_trusted_domains,
)


class TestHelpers:
    """Test helper functions"""

    def test_is_remote_reference(self):
        assert is_remote_reference("https://www.youtube.com/watch?v=x")
        assert is_remote_reference("ytdl://ytsearch:cats")
        assert not is_remote_reference("/home/user/video.mkv")
        assert not is_remote_reference("C:\\Videos\\a.mkv")
        assert not is_remote_reference("")
        assert not is_remote_reference(None)

    def test_normalize_path(self):
        assert normalize_path("C:\\cache\\a.mkv") == "C:/cache/a.mkv"
        assert normalize_path(None) == ""

    def test_same_path(self):
        assert same_path("C:\\cache\\a.mkv", "C:/cache/a.mkv")
        assert not same_path("/c/a", "/c/b")
        assert not same_path(None, None)
        assert not same_path("", "")

    def test_format_file_size(self):
        """Test file size formatting"""
        assert format_file_size(1024) == "1.0 KB"
        assert format_file_size(1048576) == "1.0 MB"
        assert format_file_size(512) == "512 B"

    def test_truncate_string(self):
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a" * 20, 10) == "aaaaaaa..."

    def test_ensure_directory(self, temp_dir):
        path = ensure_directory(temp_dir / "a" / "b")
        assert path.is_dir()


class TestValidation:
    """Test configuration validation"""

    @pytest.mark.parametrize("limit,valid", [(1, True), (5, True), ("3", True), (0, False), (101, False), ("x", False)])
    def test_validate_preload_limit(self, limit, valid):
        assert validate_preload_limit(limit)[0] is valid

    @pytest.mark.parametrize("selector,valid", [
        ("bestvideo+bestaudio/best", True),
        ("best[height<=720]", True),
        ("", False),
        ("best video", False),
        ("best[height<=720", False),
    ])
    def test_validate_format_selector(self, selector, valid):
        assert validate_format_selector(selector)[0] is valid

    def test_validate_trusted_domains(self):
        assert validate_trusted_domains(["sharepoint.com"]) == (True, None)
        assert not validate_trusted_domains("sharepoint.com")[0]
        assert not validate_trusted_domains([""])[0]
        assert not validate_trusted_domains(["https://1drv.ms"])[0]

    def test_validate_socket_path(self):
        assert not validate_socket_path("")[0]


class TestLogging:
    """Test console filtering and formatting"""

    def make_record(self, level=logging.INFO, **extra):
        record = logging.LogRecord("ytdl_preload.test", level, __file__, 1, "hello", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_console_filter(self):
        console_filter = ConsoleMessageFilter()

        assert not console_filter.filter(self.make_record())
        assert console_filter.filter(self.make_record(console_output=True))
        assert console_filter.filter(self.make_record(logging.WARNING))

    def test_plain_formatter(self):
        formatter = ColoredFormatter(use_colors=False)
        assert formatter.format(self.make_record()) == "[preload] hello"

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("500 kb") == 500 * 1024
        with pytest.raises(ValueError):
            parse_size("ten megabytes")


class TestLocalFileStore:
    """Test the filesystem FileStore"""

    def test_exists_and_delete(self, temp_dir):
        store = LocalFileStore()
        target = temp_dir / "preload-1-ab.mkv"
        target.write_bytes(b"x")

        assert store.exists(str(target))
        assert store.delete(str(target))
        assert not store.exists(str(target))
        assert not store.delete(str(target))

    def test_directories_are_not_files(self, temp_dir):
        assert not LocalFileStore().exists(str(temp_dir))

    def test_ensure_dir(self, temp_dir):
        LocalFileStore().ensure_dir(str(temp_dir / "cache" / "nested"))
        assert (temp_dir / "cache" / "nested").is_dir()

    def test_delete_by_pattern(self, temp_dir):
        for name in ("preload-1-a.mkv", "preload-2-b.mkv", "preload-3-c.mp4", "other.mkv"):
            (temp_dir / name).write_bytes(b"x")

        deleted = LocalFileStore().delete_by_pattern(str(temp_dir), "preload-*.mkv")

        assert deleted == 2
        assert sorted(p.name for p in temp_dir.iterdir()) == ["other.mkv", "preload-3-c.mp4"]
