# dht_logger/common/logging_config.py
from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

LOG_LEVEL_ENV = "DHT_LOGGER_LOG"
DEFAULT_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# marker so configure_logging() recognises its own handler
_HANDLER_NAME = "dht_logger.console"


def resolve_log_level(explicit: Optional[str] = None) -> int:
    """
    Pick the log level: explicit flag > DHT_LOGGER_LOG env var > INFO.

    Accepts level names (case-insensitive) or numeric strings.
    """
    raw = explicit or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LEVEL
    raw = str(raw).strip()
    if raw.isdigit():
        return int(raw)

    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {raw!r}")
    return level


def configure_logging(level: int = logging.INFO, *, stream: Optional[TextIO] = None) -> None:
    """
    Attach a single stderr handler to the root logger (idempotent).
    Kept out of library code; only the CLI calls this.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in root.handlers:
        if h.get_name() == _HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
