"""Logging setup shared by the command-line scripts."""
from __future__ import annotations

import logging
import os


def configure_logging(level: str | int | None = None) -> None:
    """
    Set up root logging for a script run.

    The level comes from ``level`` when given, otherwise from the ``LOG_LEVEL``
    environment variable, and defaults to INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
