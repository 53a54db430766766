"""Logging setup shared by the CLI and the API.

Console shows INFO and up; the rotating file under ``log_dir`` keeps the
engine's DEBUG run parameters. httpx/httpcore are held at WARNING so every
beacon request does not land in the file.
"""

import logging
import logging.config
import os
from typing import Any

LOG_FILENAME = "stakesim.log"
QUIET_LOGGERS = ("httpx", "httpcore")


def build_logging_config(log_dir: str = "logs", level: str = "DEBUG") -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": "INFO",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, LOG_FILENAME),
                "maxBytes": 10_485_760,
                "backupCount": 5,
                "formatter": "standard",
                "level": "DEBUG",
            },
        },
        "loggers": {
            "stakesim": {"level": level.upper()},
            **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        },
        "root": {
            "level": "INFO",
            "handlers": ["console", "file"],
        },
    }


def setup_logging(log_dir: str = "logs", level: str = "DEBUG"):
    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir, level))
