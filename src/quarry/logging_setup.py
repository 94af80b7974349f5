"""Console logging configuration for Quarry entrypoints.

Library modules only create module-level loggers; handlers are installed here
by whichever process hosts the platform.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Union


def setup_logging(level: Union[str, int] = "INFO") -> logging.Logger:
    """Install a console handler on the root logger and return the package logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
                # stdout carries the MCP stdio transport
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }
    logging.config.dictConfig(logging_config)

    # SQL echo and index internals are noisy below DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )

    return logging.getLogger("quarry")
