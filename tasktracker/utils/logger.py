"""
Logging setup shared by every module.

Each module calls ``setup_logger(__name__)`` once at import. Handlers are
attached to the ``tasktracker`` parent logger only, so child loggers
propagate to a single console (and optional rotating file) handler.
"""

import logging
from logging.handlers import RotatingFileHandler

from tasktracker.config import settings

ROOT_LOGGER_NAME = "tasktracker"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_SIZE_BYTES = 5 * 1024 * 1024
MAX_BACKUP_COUNT = 10


def _configure_root(level: int) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    # Avoid adding handlers multiple times
    if root.handlers:
        return root

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(console_handler)

    if settings.LOG_FILE:
        file_handler = RotatingFileHandler(
            settings.LOG_FILE,
            maxBytes=MAX_LOG_SIZE_BYTES,
            backupCount=MAX_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, DATE_FORMAT))
        root.addHandler(file_handler)

    return root


def setup_logger(name: str, level: str | None = None) -> logging.Logger:
    """Return a logger under the ``tasktracker`` hierarchy."""
    log_level = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    _configure_root(log_level)

    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
