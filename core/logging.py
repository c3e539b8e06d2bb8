# core/logging.py
import logging.config

from core.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            # analytics events are chatty; keep them on their own logger
            "analytics": {"level": level, "propagate": True},
        },
    })
