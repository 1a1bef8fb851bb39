"""Logging setup shared by the CLI operations."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from core.config import LOG_FILE, LOG_FORMAT, LOG_LEVEL

_HANDLER_MARK = "_raytracer_handler"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger with a console handler and, optionally, a
    rotating file handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Defaults to
            RAYTRACER_LOG_LEVEL.
        log_file: Path of the log file. Defaults to RAYTRACER_LOG_FILE; no
            file handler is installed when neither is set.

    Returns:
        The configured root logger.
    """
    if level is None:
        level = LOG_LEVEL
    if log_file is None:
        log_file = LOG_FILE

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Calling twice must not duplicate output
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_MARK, True)
    root.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        root.addHandler(file_handler)

    return root
