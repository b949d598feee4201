"""
Logging Configuration

Console logging for the API and the seed script. Application modules log
under the ``thoughtstream`` namespace; the libraries that chatter at DEBUG
during capture (SQL echo, Pillow decoding, aiosqlite) are held back.
"""

import logging
import sys
from logging.config import dictConfig

from thoughtstream.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Minimum level per noisy third-party logger
QUIET_LOGGERS: dict[str, str] = {
    "sqlalchemy.engine": "WARNING",
    "aiosqlite": "INFO",
    "PIL": "INFO",
}


def _stricter(a: str, b: str) -> str:
    levels = logging.getLevelNamesMapping()
    return a if levels[a] >= levels[b] else b


def setup_logging(level: str | None = None) -> None:
    """
    Route all logging to stdout with one timestamped format.

    Args:
        level: Overrides the LOG_LEVEL setting.

    Note:
        Call once at process startup.
    """
    log_level = (level or settings.LOG_LEVEL).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
            },
            "root": {"level": log_level, "handlers": ["console"]},
            "loggers": {
                "thoughtstream": {"level": log_level},
                **{
                    name: {"level": _stricter(floor, log_level)}
                    for name, floor in QUIET_LOGGERS.items()
                },
            },
        }
    )
