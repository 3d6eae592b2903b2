"""Tests for gifclip.io module."""

import logging

import pytest

from gifclip.io import atomic_write, ensure_directories, format_file_size, setup_logging


class TestFormatFileSize:
    """Tests for format_file_size function."""

    @pytest.mark.parametrize(
        "num_bytes, expected",
        [
            (0, "0 Bytes"),
            (-5, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (1048576, "1 MB"),
            (5 * 1024 * 1024 + 256 * 1024, "5.25 MB"),
            (3 * 1024**3, "3 GB"),
            (2048 * 1024**3, "2048 GB"),
        ],
    )
    def test_format(self, num_bytes, expected):
        assert format_file_size(num_bytes) == expected


class TestAtomicWrite:
    """Tests for atomic_write context manager."""

    def test_writes_target(self, tmp_path):
        target = tmp_path / "nested" / "clip.gif"
        with atomic_write(target, mode="wb") as f:
            f.write(b"GIF89a")

        assert target.read_bytes() == b"GIF89a"
        assert list(target.parent.iterdir()) == [target]

    def test_failure_leaves_no_file(self, tmp_path):
        target = tmp_path / "clip.gif"
        with pytest.raises(RuntimeError):
            with atomic_write(target, mode="wb") as f:
                f.write(b"partial")
                raise RuntimeError("disk full")

        assert not target.exists()
        assert list(tmp_path.iterdir()) == []


class TestDirectories:
    """Tests for logging and directory helpers."""

    def test_ensure_directories(self, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b" / "c"
        ensure_directories(a, b)
        assert a.is_dir() and b.is_dir()

    def test_setup_logging_creates_log_file(self, tmp_path):
        logger = setup_logging(tmp_path / "logs", "DEBUG")

        assert logger.name == "gifclip"
        assert list((tmp_path / "logs").glob("gifclip_*.log"))
        for handler in logging.getLogger().handlers[:]:
            if isinstance(handler, logging.FileHandler):
                logging.getLogger().removeHandler(handler)
                handler.close()
