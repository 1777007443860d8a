# dht_logger/app/sink_set.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.reading import Reading


@dataclass(frozen=True)
class SinkFailure:
    sink_name: str
    error: Exception


def sink_name(sink: ReadingSink) -> str:
    return getattr(sink, "name", None) or type(sink).__name__


class SinkSet:
    """
    Ordered fan-out to the configured reading sinks.

    dispatch() always attempts every sink, in configuration order; failures are
    logged and returned, never raised.
    """

    def __init__(self, sinks: Iterable[ReadingSink] = (), *, logger: Optional[logging.Logger] = None):
        self._sinks: List[ReadingSink] = list(sinks)
        self._log = logger or logging.getLogger(__name__)

    def __iter__(self) -> Iterator[ReadingSink]:
        return iter(self._sinks)

    def __len__(self) -> int:
        return len(self._sinks)

    def add(self, sink: ReadingSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def dispatch(self, reading: Reading) -> List[SinkFailure]:
        failures: List[SinkFailure] = []
        for s in self._sinks:
            try:
                s.write(reading)
            except Exception as e:
                self._log.exception("SINK_WRITE_ERROR sink=%s", sink_name(s))
                failures.append(SinkFailure(sink_name=sink_name(s), error=e))

        if failures:
            self._log.warning(
                "DISPATCH_PARTIAL failed=%d/%d sinks=%s",
                len(failures),
                len(self._sinks),
                [f.sink_name for f in failures],
            )
        return failures

    def close(self) -> None:
        for s in self._sinks:
            try:
                s.close()
            except Exception:
                self._log.exception("SINK_CLOSE_ERROR sink=%s", sink_name(s))
