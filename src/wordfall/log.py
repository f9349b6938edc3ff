import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_LEVEL_ENV_VAR = "LOG_LEVEL"
LOG_DIR_ENV_VAR = "WORDFALL_LOG_DIR"
MAX_LOG_BYTES = 5 * 1024 * 1024  # 5 MiB
BACKUP_COUNT = 3

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _log_file_for(name: str) -> Path | None:
    """Return the rotating log file for ``name``, if file logging is enabled."""

    log_dir = os.getenv(LOG_DIR_ENV_VAR)
    if not log_dir:
        return None
    path = Path(log_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path / f"{name.replace('.', '_') or 'root'}.log"


def _configure_logger(logger: logging.Logger, log_level: str) -> None:
    level = getattr(logging, log_level, logging.INFO)
    logger.setLevel(level)

    if logger.handlers:
        # Already configured; keep existing handlers.
        return

    formatter = logging.Formatter(_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = _log_file_for(logger.name)
    if log_file is not None:
        handlers.append(RotatingFileHandler(log_file, maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger with a stream handler and an optional rolling file handler."""

    log_level = os.getenv(LOG_LEVEL_ENV_VAR, "INFO").upper()
    logger = logging.getLogger(name)
    _configure_logger(logger, log_level)
    return logger


def set_level(log_level: str) -> None:
    """Apply ``log_level`` to every logger created by :func:`get_logger`."""

    level = getattr(logging, str(log_level).upper(), logging.INFO)
    for name, logger in logging.root.manager.loggerDict.items():
        if not name.startswith("wordfall") or not isinstance(logger, logging.Logger):
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
