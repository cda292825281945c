"""Central logging configuration for the survey core.

Applies a root stdout handler so all `surveycore.*` module loggers emit
without per-module setup. The level is read from SURVEYCORE_LOG_LEVEL and
defaults to INFO; repeated calls do not add duplicate handlers.
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "surveycore": {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure package-wide logging once.

    If the root logger already has handlers, return to prevent duplicate output
    (embedding applications usually configure logging themselves).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    resolved = (level or os.environ.get("SURVEYCORE_LOG_LEVEL") or "INFO").upper()
    dictConfig(_dict_config(resolved))
