# dht_logger/sinks/console.py
from __future__ import annotations

import json
import sys
from typing import Optional, TextIO

from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.reading import Reading


class ConsoleSink(ReadingSink):
    """Print one JSON record per reading to a text stream (stdout by default)."""

    name = "console"

    def __init__(self, *, stream: Optional[TextIO] = None, pretty: bool = False):
        self._stream = stream
        self._indent = 2 if pretty else None

    def write(self, reading: Reading) -> None:
        stream = self._stream or sys.stdout
        stream.write(json.dumps(reading.as_dict(), indent=self._indent) + "\n")
        stream.flush()

    def close(self) -> None:
        return None
