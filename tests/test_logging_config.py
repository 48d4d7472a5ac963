"""Tests for logging configuration."""

import logging

import pytest

from cloud_files.logging_config import LOG_FILE_NAME, _rotate_log_if_needed, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handler changes made by setup_logging."""
    logger = logging.getLogger("cloud_files")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_to_log_file(self, tmp_path):
        setup_logging(tmp_path / "logs")

        get_logger("services.storage").info("hello from the client")
        for handler in logging.getLogger("cloud_files").handlers:
            handler.flush()

        content = (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")
        assert "hello from the client" in content
        assert "cloud_files.services.storage" in content

    def test_respects_level(self, tmp_path):
        logger = setup_logging(tmp_path, level=logging.WARNING)

        assert logger.level == logging.WARNING
        assert logger.handlers[0].level == logging.WARNING

    def test_replaces_existing_handlers(self, tmp_path):
        setup_logging(tmp_path)
        logger = setup_logging(tmp_path)

        assert len(logger.handlers) == 1


class TestRotation:
    """Tests for _rotate_log_if_needed."""

    def test_small_file_not_rotated(self, tmp_path):
        log_file = tmp_path / "x.log"
        log_file.write_text("small")

        _rotate_log_if_needed(log_file, max_bytes=100)

        assert log_file.exists()
        assert not (tmp_path / "x.log.1").exists()

    def test_large_file_rotated(self, tmp_path):
        log_file = tmp_path / "x.log"
        log_file.write_text("a" * 200)
        (tmp_path / "x.log.1").write_text("older")

        _rotate_log_if_needed(log_file, max_bytes=100, backup_count=3)

        assert not log_file.exists()
        assert (tmp_path / "x.log.1").read_text() == "a" * 200
        assert (tmp_path / "x.log.2").read_text() == "older"

    def test_oldest_backup_dropped(self, tmp_path):
        log_file = tmp_path / "x.log"
        log_file.write_text("a" * 200)
        for i in (1, 2):
            (tmp_path / f"x.log.{i}").write_text(f"backup {i}")

        _rotate_log_if_needed(log_file, max_bytes=100, backup_count=2)

        assert (tmp_path / "x.log.1").read_text() == "a" * 200
        assert (tmp_path / "x.log.2").read_text() == "backup 1"
        assert not (tmp_path / "x.log.3").exists()

    def test_missing_file_ignored(self, tmp_path):
        _rotate_log_if_needed(tmp_path / "absent.log")


class TestGetLogger:
    """Tests for get_logger."""

    def test_prefixes_name(self):
        assert get_logger("cli").name == "cloud_files.cli"

    def test_module_name_not_doubled(self):
        assert get_logger("cloud_files.commands.objects").name == "cloud_files.commands.objects"
