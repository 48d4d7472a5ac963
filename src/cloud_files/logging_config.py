"""Logging configuration for cloud-files.

Library modules only create loggers; handlers are attached here, by the CLI
or by a host application.
"""

import logging
from pathlib import Path

LOG_FILE_NAME = "cloud_files.log"


def _rotate_log_if_needed(log_file: Path, max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5) -> None:
    """Rotate log file on startup if it exceeds max size.

    Args:
        log_file: Path to the log file
        max_bytes: Maximum file size before rotation (default: 10MB)
        backup_count: Number of backup files to keep (default: 5)
    """
    if not log_file.exists():
        return

    if log_file.stat().st_size < max_bytes:
        return

    # Shift backups up by one; the oldest falls off the end
    oldest = log_file.parent / f"{log_file.name}.{backup_count}"
    if oldest.exists():
        oldest.unlink()

    for i in range(backup_count - 1, 0, -1):
        source = log_file.parent / f"{log_file.name}.{i}"
        if source.exists():
            source.rename(log_file.parent / f"{log_file.name}.{i + 1}")

    log_file.rename(log_file.parent / f"{log_file.name}.1")


def setup_logging(log_dir: Path, level: int = logging.INFO) -> logging.Logger:
    """Send cloud_files log records to a file, rotating it on startup.

    Args:
        log_dir: Directory to store log files
        level: Minimum level written to the file

    Returns:
        The configured "cloud_files" logger
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    _rotate_log_if_needed(log_file)

    logger = logging.getLogger("cloud_files")
    logger.setLevel(level)
    logger.handlers.clear()

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging to {log_file}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the cloud_files namespace.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    if name == "cloud_files" or name.startswith("cloud_files."):
        return logging.getLogger(name)
    return logging.getLogger(f"cloud_files.{name}")
