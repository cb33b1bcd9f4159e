from __future__ import annotations

import logging
import os
import sys
from typing import Optional


_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_level(level: Optional[str] = None) -> int:
    """Map a level name to a logging level.

    Falls back to WAV_CUE_LOG_LEVEL, then LOG_LEVEL, then INFO. Unknown names
    resolve to INFO.
    """
    name = (level or os.getenv("WAV_CUE_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, writing to stderr.

    CSV output goes to stdout, so log records must never share that stream.
    Modules call this on import through get_logger; a later call with an
    explicit level (the CLI --log_level flag) only adjusts the root level.

    Args:
        level: Optional log level name (e.g., "INFO", "DEBUG").
    """
    global _CONFIGURED
    if _CONFIGURED:
        if level:
            logging.getLogger().setLevel(resolve_level(level))
        return

    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger with global config ensured."""
    setup_logging()
    return logging.getLogger(name)
