"""Logging utilities."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger for applications embedding the resolvers.

    ``level`` falls back to the ``LOG_LEVEL`` environment variable, then INFO.
    """

    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
    )


__all__ = ["LOG_FORMAT", "configure_logging"]
