from __future__ import annotations

import logging

import pytest

from dht_logger.app.loop import AcquisitionLoop, LoopState, run
from dht_logger.app.sink_set import SinkSet
from dht_logger.core.errors import DeviceDisconnectedError
from dht_logger.model.reading import Measurement, SensorError
from dht_logger.transport.base import Transport
from dht_logger.transport.errors import TransportIOError, TransportTimeout

ROOM = b'{"room":{"t":21.5,"h":44.0,"hi":21.0}}'
CRC = b'{"room":{"error":"crc fail"}}'


class ScriptedSource(Transport):
    """Plays back a script of lines / exceptions; raises TransportIOError when exhausted."""

    def __init__(self, script):
        self.script = list(script)
        self.reads = 0

    @property
    def name(self) -> str:
        return "fake0"

    def open(self) -> None: ...
    def close(self) -> None: ...

    def read_line(self) -> bytes:
        self.reads += 1
        if not self.script:
            raise TransportIOError("script exhausted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSink:
    def __init__(self, name="rec", fail=False):
        self.name = name
        self.fail = fail
        self.readings = []

    def write(self, reading):
        if self.fail:
            raise OSError("write failed")
        self.readings.append(reading)

    def close(self):
        pass


def _loop(script, *sinks):
    sinks = sinks or (RecordingSink(),)
    return AcquisitionLoop(ScriptedSource(script), list(sinks), logger=logging.getLogger("test.loop")), sinks


def test_three_valid_lines_three_dispatches():
    source = ScriptedSource([ROOM, ROOM, ROOM, ROOM])
    sink = RecordingSink()
    loop = AcquisitionLoop(source, [sink])

    stats = loop.run(iterations=3)

    assert len(sink.readings) == 3
    assert stats.dispatched == 3
    assert stats.cycles == 3
    assert stats.ok
    assert loop.state is LoopState.TERMINATED
    assert source.reads == 3


def test_measurement_dispatched_unchanged():
    loop, (sink,) = _loop([ROOM])
    loop.run(iterations=1)
    assert sink.readings[0].sensors == {"room": Measurement(21.5, 44.0, 21.0)}


def test_sensor_error_dispatched_and_warned(caplog):
    loop, (sink,) = _loop([CRC])

    with caplog.at_level(logging.WARNING, logger="test.loop"):
        stats = loop.run(iterations=1)

    assert sink.readings[0].sensors == {"room": SensorError("crc fail")}
    assert stats.sensor_errors == 1
    msgs = [r.getMessage() for r in caplog.records if "SENSOR_ERROR" in r.getMessage()]
    assert len(msgs) == 1
    assert "sensor=room" in msgs[0]
    assert "message=crc fail" in msgs[0]
    assert f"raw={CRC!r}" in msgs[0]


def test_hard_io_error_on_second_read_is_fatal_after_one_dispatch():
    loop, (sink,) = _loop([ROOM, TransportIOError("device unplugged"), ROOM])

    with pytest.raises(DeviceDisconnectedError) as ei:
        loop.run(iterations=5)

    assert len(sink.readings) == 1
    assert isinstance(ei.value.__cause__, TransportIOError)
    assert loop.state is LoopState.TERMINATED
    assert isinstance(loop.stats.error, TransportIOError)
    assert not loop.stats.ok


def test_unbounded_run_ends_only_on_transport_failure():
    loop, (sink,) = _loop([ROOM] * 7)

    with pytest.raises(DeviceDisconnectedError):
        loop.run()

    assert len(sink.readings) == 7


def test_empty_line_skipped_but_counts(caplog):
    loop, (sink,) = _loop([b"", b"   ", ROOM])

    with caplog.at_level(logging.DEBUG, logger="test.loop"):
        stats = loop.run(iterations=3)

    assert len(sink.readings) == 1
    assert stats.empty_lines == 2
    assert stats.cycles == 3
    assert stats.ok
    assert not any(r.levelno >= logging.WARNING for r in caplog.records)


def test_decode_errors_logged_with_raw_line_and_counted(caplog):
    bad = b'{"good":{"t":1,"h":2,"hi":3},"bad":{"x":1}}'
    loop, (sink,) = _loop([b"{garbage", bad, ROOM])

    with caplog.at_level(logging.WARNING, logger="test.loop"):
        stats = loop.run(iterations=3)

    assert len(sink.readings) == 1
    assert stats.decode_errors == 2
    msgs = [r.getMessage() for r in caplog.records if "DECODE_FAILED" in r.getMessage()]
    assert len(msgs) == 2
    assert "{garbage" in msgs[0]
    assert "kind=unrecognized_sensor_shape" in msgs[1]


@pytest.mark.parametrize(
    "bad",
    [
        b'{"room":{"t":1' + b"0" * 400 + b',"h":44.0,"hi":21.0}}',
        b'{"a":' + b"[" * 100_000 + b"]" * 100_000 + b"}",
        b"\xff\xfe{}",
        b"42",
        b'"room"',
        b"[1,2]",
        b"null",
    ],
    ids=["int-overflow", "deep-nesting", "invalid-utf8", "number", "string", "array", "null"],
)
def test_bad_line_is_counted_and_next_line_still_dispatched(bad, caplog):
    loop, (sink,) = _loop([bad, ROOM])

    with caplog.at_level(logging.WARNING, logger="test.loop"):
        stats = loop.run(iterations=2)

    assert stats.decode_errors == 1
    assert stats.cycles == 2
    assert stats.ok
    assert len(sink.readings) == 1
    assert sink.readings[0].sensors == {"room": Measurement(21.5, 44.0, 21.0)}
    assert sum("DECODE_FAILED" in r.getMessage() for r in caplog.records) == 1


def test_timeouts_do_not_consume_iterations(caplog):
    loop, (sink,) = _loop([TransportTimeout("t"), ROOM, TransportTimeout("t"), TransportTimeout("t"), ROOM])

    with caplog.at_level(logging.WARNING, logger="test.loop"):
        stats = loop.run(iterations=2)

    assert len(sink.readings) == 2
    assert stats.timeouts == 3
    assert stats.cycles == 2
    assert sum("READ_TIMEOUT" in r.getMessage() for r in caplog.records) == 3


def test_sink_failure_does_not_stop_loop_or_other_sinks():
    bad = RecordingSink("bad", fail=True)
    good = RecordingSink("good")
    loop, _ = _loop([ROOM, CRC], bad, good)

    stats = loop.run(iterations=2)

    assert len(good.readings) == 2
    assert stats.sink_failures == 2
    assert stats.dispatched == 2
    assert stats.ok


def test_zero_iterations_reads_nothing():
    source = ScriptedSource([ROOM])
    loop = AcquisitionLoop(source, [RecordingSink()])
    stats = loop.run(iterations=0)
    assert source.reads == 0
    assert stats.cycles == 0
    assert loop.state is LoopState.TERMINATED


def test_negative_iterations_rejected():
    loop, _ = _loop([ROOM])
    with pytest.raises(ValueError):
        loop.run(iterations=-1)


def test_step_state_progression():
    loop, _ = _loop([ROOM, TransportTimeout("t")])
    assert loop.state is LoopState.IDLE

    assert loop.step() is True
    assert loop.state is LoopState.DISPATCHING

    assert loop.step() is False
    assert loop.state is LoopState.READING


def test_accepts_prebuilt_sink_set_and_module_level_run():
    sink = RecordingSink()
    sinks = SinkSet([sink])

    stats = run(ScriptedSource([ROOM, ROOM]), sinks, iterations=2)

    assert stats.dispatched == 2
    assert len(sink.readings) == 2
