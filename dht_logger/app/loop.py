# dht_logger/app/loop.py
"""
Read -> decode -> dispatch loop.

Failure policy per stage:
  - read timeout:      warn, retry; does not consume the iteration budget
  - hard read failure: fatal, raised as DeviceDisconnectedError
  - empty line:        debug, skipped; consumes one iteration
  - other decode error: warn with the raw line, skipped; consumes one iteration
  - sink failure:      logged by the SinkSet, other sinks still written
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from dht_logger.core.errors import DecodeError, DeviceDisconnectedError, EmptyLineError
from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.codec import decode_line
from dht_logger.model.reading import Reading
from dht_logger.transport.base import Transport
from dht_logger.transport.errors import TransportError, TransportTimeout
from .sink_set import SinkSet


class LoopState(str, Enum):
    IDLE = "idle"
    READING = "reading"
    DECODING = "decoding"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


@dataclass
class LoopStats:
    cycles: int = 0
    dispatched: int = 0
    empty_lines: int = 0
    decode_errors: int = 0
    timeouts: int = 0
    sensor_errors: int = 0
    sink_failures: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AcquisitionLoop:
    """
    Single-threaded acquisition loop owning one line source and a set of sinks.

    run(None) loops until the transport fails; run(n) stops after n lines were
    read and handed to the decoder (timeouts do not count).
    """

    def __init__(
        self,
        source: Transport,
        sinks: Union[SinkSet, Iterable[ReadingSink]],
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._log = logger or logging.getLogger(__name__)
        self._source = source
        self._sinks = sinks if isinstance(sinks, SinkSet) else SinkSet(sinks, logger=self._log)
        self._state = LoopState.IDLE
        self._stats = LoopStats()

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def stats(self) -> LoopStats:
        return self._stats

    @property
    def sinks(self) -> SinkSet:
        return self._sinks

    def run(self, iterations: Optional[int] = None) -> LoopStats:
        if iterations is not None and iterations < 0:
            raise ValueError(f"iterations must be >= 0 or None, got {iterations}")

        self._stats = LoopStats()
        remaining = iterations
        self._log.info(
            "ACQUISITION_START source=%s sinks=%d iterations=%s",
            self._source.name,
            len(self._sinks),
            "forever" if iterations is None else iterations,
        )

        try:
            while remaining is None or remaining > 0:
                if self.step() and remaining is not None:
                    remaining -= 1
        finally:
            self._state = LoopState.TERMINATED

        self._log.info(
            "ACQUISITION_DONE cycles=%d dispatched=%d decode_errors=%d timeouts=%d",
            self._stats.cycles,
            self._stats.dispatched,
            self._stats.decode_errors,
            self._stats.timeouts,
        )
        return self._stats

    def step(self) -> bool:
        """
        Run one cycle. Returns True if a line was read (and so counts as an
        iteration), False on a read timeout.
        """
        self._state = LoopState.READING
        try:
            line = self._source.read_line()
        except TransportTimeout as e:
            self._stats.timeouts += 1
            self._log.warning("READ_TIMEOUT source=%s reason=%s", self._source.name, e)
            return False
        except TransportError as e:
            self._stats.error = e
            self._state = LoopState.TERMINATED
            self._log.error("TRANSPORT_FAILED source=%s error=%s", self._source.name, e)
            raise DeviceDisconnectedError(
                f"Lost connection to {self._source.name}: {e}",
                hint="Check the cable / device and restart the logger.",
                details={"source": self._source.name},
            ) from e

        self._stats.cycles += 1

        self._state = LoopState.DECODING
        try:
            reading = decode_line(line)
        except EmptyLineError:
            self._stats.empty_lines += 1
            self._log.debug("EMPTY_LINE skipped")
            return True
        except DecodeError as e:
            self._stats.decode_errors += 1
            self._log.warning("DECODE_FAILED kind=%s reason=%s raw=%r", e.kind, e, e.raw)
            return True

        self._state = LoopState.DISPATCHING
        self._dispatch(reading, line)
        return True

    def _dispatch(self, reading: Reading, raw: bytes) -> None:
        for label, err in reading.errors.items():
            self._stats.sensor_errors += 1
            self._log.warning("SENSOR_ERROR sensor=%s message=%s raw=%r", label, err.message, raw)

        failures = self._sinks.dispatch(reading)
        self._stats.dispatched += 1
        self._stats.sink_failures += len(failures)


def run(
    source: Transport,
    sinks: Union[SinkSet, Iterable[ReadingSink]],
    iterations: Optional[int] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> LoopStats:
    return AcquisitionLoop(source, sinks, logger=logger).run(iterations)
