"""Logging configuration.

The dashboard owns the terminal, so while it runs log records go to a file;
the one-shot CLI commands log to stderr.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_BACKUP_COUNT = 7  # days of rotated logs kept


def default_log_file() -> Path:
    return Path.home() / ".pyre" / "pyre.log"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    backup_count: int = LOG_BACKUP_COUNT,
) -> logging.Logger:
    """Configure the root logger, replacing any handlers already installed.

    A log file rotates at midnight and keeps ``backup_count`` old files.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_file is not None:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=max(0, backup_count), encoding="utf-8"
        )
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    logger = logging.getLogger("pyre")
    logger.debug("logging configured (level=%s, file=%s)", logging.getLevelName(level), log_file)
    return logger
