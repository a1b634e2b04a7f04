"""Idempotent stderr logging for the ``fdbstat`` logger tree."""

from __future__ import annotations

import logging
import sys
from typing import IO

_CONFIGURED = False

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str = logging.INFO, stream: IO[str] | None = None) -> None:
    """Attach one handler to the ``fdbstat`` logger. Later calls only adjust the level."""
    global _CONFIGURED  # noqa: PLW0603
    logger = logging.getLogger("fdbstat")
    logger.setLevel(_resolve_level(level))
    if _CONFIGURED:
        return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True
