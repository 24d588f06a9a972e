"""
Logging configuration for the notes client.
"""

from __future__ import annotations

import logging
import sys

from .config import get_settings


def setup_logging() -> logging.Logger:
    """
    Configure application logging.

    Safe to call on every Streamlit rerun; handlers are installed once.
    """
    root = logging.getLogger("ainotes")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root.addHandler(handler)
    root.setLevel(get_settings().log_level.upper())
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"ainotes.{name}")


__all__ = ["setup_logging", "get_logger"]
