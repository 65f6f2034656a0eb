"""Structured event logging.

Every module logs dotted event names (``tree.loaded``, ``store.api_error``)
with keyword context through structlog. Records go through stdlib ``logging``
to stderr so they never interleave with CLI output on stdout.

``FAMILY_TREE_LOG_FORMAT=console`` switches from JSON lines to structlog's
human-readable renderer.
"""
from __future__ import annotations

import logging
from typing import Literal

import structlog

from family_tree.config import load_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


def _renderer(fmt: str):
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(level: LogLevel | None = None, fmt: LogFormat | None = None) -> None:
    """Configure structlog; unset arguments come from the environment."""
    settings = load_settings()
    numeric = getattr(logging, level or settings["log_level"], logging.INFO)
    logging.basicConfig(format="%(message)s", level=numeric)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            _renderer(fmt or settings["log_format"]),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "family_tree"):
    return structlog.get_logger(name)


configure_logging()
