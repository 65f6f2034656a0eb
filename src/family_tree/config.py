"""Environment-driven settings.

Values are read from the process environment, optionally seeded from a
``.env`` file in the working directory.
"""
from __future__ import annotations

import os

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:3666"


def _f(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _i(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def load_settings() -> dict:
    """Load configuration from environment."""
    load_dotenv()

    return {
        "api_url": os.getenv("FAMILY_TREE_API_URL", DEFAULT_API_URL),
        "timeout": _f("FAMILY_TREE_TIMEOUT", 30.0),
        "log_level": os.getenv("FAMILY_TREE_LOG_LEVEL", "INFO").upper(),
        "log_format": os.getenv("FAMILY_TREE_LOG_FORMAT", "json").lower(),
    }
