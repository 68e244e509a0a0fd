"""Logging configuration."""

import logging.config

from app.core.config import LogFormatEnum, settings

FORMATS = {
    LogFormatEnum.simple: "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
    LogFormatEnum.json: (
        '{"time": "%(asctime)s", "level": "%(levelname)s", '
        '"logger": "%(name)s", "message": "%(message)s"}'
    ),
}


def setup_logging() -> None:
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": FORMATS[settings.log_format]},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "level": settings.log_level.value,
                "handlers": ["console"],
            },
        }
    )
