# dht_logger/sinks/logging_sink.py
from __future__ import annotations

import json
import logging
from typing import Optional

from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.reading import Reading


class LoggingSink(ReadingSink):
    """
    Log each reading as pretty JSON through the logging module.

    verbose=True logs at INFO, otherwise at DEBUG (visible only with a debug
    log level).
    """

    name = "log"

    def __init__(self, *, logger: Optional[logging.Logger] = None, verbose: bool = False):
        self._log = logger or logging.getLogger("dht_logger.readings")
        self._level = logging.INFO if verbose else logging.DEBUG

    @property
    def verbose(self) -> bool:
        return self._level == logging.INFO

    def write(self, reading: Reading) -> None:
        if not self._log.isEnabledFor(self._level):
            return
        pretty = json.dumps(reading.as_dict(), indent=2)
        self._log.log(self._level, "Received measurement:\n%s", pretty)

    def close(self) -> None:
        return None
