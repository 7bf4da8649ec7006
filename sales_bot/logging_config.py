"""
Logging setup for the sales bot service and its scripts.

Call ``setup_logging()`` once at startup (``sales_bot.main`` does). Modules
only ever do ``logging.getLogger(__name__)``.

The level comes from the ``level`` argument, else the ``LOG_LEVEL``
environment variable, else INFO. Unknown names fall back to INFO.

Customer names and order notes are logged at DEBUG only, so INFO output can
be shipped to shared log storage.
"""
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGERS = ("sales_bot",)

# Held at WARNING unless DEBUG is requested
NOISY_LOGGERS = ("urllib3", "sqlalchemy.engine", "uvicorn.access")


def resolve_level(level: Optional[str] = None) -> int:
    name = (level if level is not None else os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int) or name in ("NOTSET", "WARN", "FATAL"):
        return logging.INFO
    return resolved


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure stdout logging for the application.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive).
    """
    numeric_level = resolve_level(level)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
    )

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.NOTSET if numeric_level == logging.DEBUG else logging.WARNING
        )

    logging.getLogger(__name__).debug(
        "Logging configured at %s level", logging.getLevelName(numeric_level)
    )
