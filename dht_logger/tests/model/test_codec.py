from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from dht_logger.core.errors import (
    DecodeError,
    EmptyLineError,
    MalformedLineError,
    UnrecognizedSensorShapeError,
)
from dht_logger.model.codec import decode_line, decode_sensor, encode_line
from dht_logger.model.reading import Measurement, Reading, SensorError


def test_decode_measurement_example():
    r = decode_line(b'{"room":{"t":21.5,"h":44.0,"hi":21.0}}')
    assert r.sensors == {"room": Measurement(21.5, 44.0, 21.0)}


def test_decode_error_example():
    r = decode_line(b'{"room":{"error":"crc fail"}}')
    assert r.sensors == {"room": SensorError("crc fail")}


def test_decode_accepts_short_error_key():
    r = decode_line('{"room":{"e":"checksum"}}')
    assert r["room"] == SensorError("checksum")


def test_decode_error_field_wins_over_measurement_fields():
    r = decode_line('{"room":{"t":1,"h":2,"hi":3,"error":"stale"}}')
    assert r["room"] == SensorError("stale")


def test_decode_mixed_sensors_and_ints():
    r = decode_line(b'{"a":{"t":-5,"h":90,"hi":-7.5},"b":{"error":"no response"}}\r\n')
    assert r.sensors == {
        "a": Measurement(-5.0, 90.0, -7.5),
        "b": SensorError("no response"),
    }


def test_decode_empty_object_is_valid_empty_reading():
    r = decode_line(b"{}")
    assert r.is_empty


def test_decode_uses_given_timestamp():
    ts = datetime(2024, 5, 6, tzinfo=timezone.utc)
    assert decode_line("{}", timestamp=ts).timestamp == ts


@pytest.mark.parametrize("line", [b"", b"   ", b"\r\n", "\t \n"])
def test_decode_empty_lines(line):
    with pytest.raises(EmptyLineError) as ei:
        decode_line(line)
    assert ei.value.kind == "empty"
    assert isinstance(ei.value, DecodeError)


@pytest.mark.parametrize(
    "line",
    [
        b'{"room":{"t":21.5',          # truncated
        b"not json",
        b"[1, 2, 3]",                  # wrong top-level type
        b'"room"',
        b"42",
        b"\xff\xfe{}",                 # invalid utf-8
    ],
)
def test_decode_malformed_lines(line):
    with pytest.raises(MalformedLineError) as ei:
        decode_line(line)
    assert ei.value.kind == "malformed"
    assert ei.value.raw == line


@pytest.mark.parametrize(
    "value",
    [
        {"t": 1.0, "h": 2.0},                 # missing hi
        {},                                  # nothing at all
        {"temperature": 1, "humidity": 2, "heat_index": 3},
        {"t": "1", "h": 2.0, "hi": 3.0},     # string number
        {"t": True, "h": 2.0, "hi": 3.0},    # bool
        {"error": 17},                       # non-string error
        [1, 2, 3],                           # not an object
        "offline",
    ],
)
def test_decode_sensor_unrecognized_shapes(value):
    with pytest.raises(UnrecognizedSensorShapeError) as ei:
        decode_sensor("room", value)
    assert ei.value.label == "room"


def test_decode_rejects_non_finite_numbers():
    with pytest.raises(UnrecognizedSensorShapeError):
        decode_line(b'{"room":{"t":NaN,"h":1,"hi":1}}')
    with pytest.raises(UnrecognizedSensorShapeError):
        decode_line(b'{"room":{"t":Infinity,"h":1,"hi":1}}')


def test_one_bad_sensor_invalidates_whole_line():
    line = b'{"good":{"t":20.0,"h":50.0,"hi":20.0},"bad":{"temp":3}}'
    with pytest.raises(UnrecognizedSensorShapeError) as ei:
        decode_line(line)

    assert ei.value.label == "bad"
    assert ei.value.raw == line
    assert ei.value.kind == "unrecognized_sensor_shape"


def test_encode_line_is_compact_wire_format():
    r = Reading(sensors={"room": Measurement(21.5, 44.0, 21.0), "x": SensorError("crc fail")})
    out = encode_line(r)

    assert out.endswith(b"\n")
    assert json.loads(out) == {
        "room": {"t": 21.5, "h": 44.0, "hi": 21.0},
        "x": {"error": "crc fail"},
    }


def test_decode_after_encode_keeps_mapping():
    original = Reading(
        sensors={
            "kitchen": Measurement(23.25, 41.0, 23.1),
            "garage": Measurement(-3.0, 77.5, -4.2),
            "attic": SensorError("DHT timeout"),
        }
    )

    decoded = decode_line(encode_line(original))
    assert decoded.sensors == original.sensors


def test_decode_after_encode_empty_reading():
    assert decode_line(encode_line(Reading())).sensors == {}


def test_integer_too_large_for_float_is_unrecognized_shape():
    line = b'{"room":{"t":1' + b"0" * 400 + b',"h":44.0,"hi":21.0}}'

    with pytest.raises(UnrecognizedSensorShapeError) as ei:
        decode_line(line)
    assert ei.value.label == "room"
    assert ei.value.details == {"invalid": ["t"]}


def test_deeply_nested_line_is_malformed():
    line = b'{"a":' + b"[" * 100_000 + b"]" * 100_000 + b"}"

    with pytest.raises(MalformedLineError) as ei:
        decode_line(line)
    assert ei.value.raw == line


def test_integer_over_digit_limit_is_malformed_or_unrecognized():
    # interpreters with an int digit limit refuse to parse it at all
    line = b'{"room":{"t":' + b"9" * 5000 + b',"h":1,"hi":1}}'

    with pytest.raises((MalformedLineError, UnrecognizedSensorShapeError)):
        decode_line(line)
