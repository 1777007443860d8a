# dht_logger/model/codec.py
"""
Line codec for the DHT firmware wire format.

One JSON object per line, one level of nesting:

    {"<label>": {"t": 21.5, "h": 44.0, "hi": 21.0}, "<label>": {"error": "crc fail"}}

decode_line() is strict: every sensor entry must be either a measurement
(t/h/hi, finite numbers) or an error report. A single unrecognized entry
rejects the whole line.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from dht_logger.core.errors import (
    EmptyLineError,
    MalformedLineError,
    UnrecognizedSensorShapeError,
)
from .reading import Measurement, Reading, SensorError, SensorResult

# wire field -> Measurement field
MEASUREMENT_FIELDS = {
    "t": "temperature",
    "h": "humidity",
    "hi": "heat_index",
}

# "error" is what the firmware documents; older builds send "e"
ERROR_FIELDS = ("error", "e")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # integer literal too large for a float
        return False


def decode_sensor(label: str, value: Any, *, raw: bytes | str = b"") -> SensorResult:
    """
    Decode one sensor entry into a Measurement or SensorError.

    Raises UnrecognizedSensorShapeError if the entry matches neither.
    """
    if not isinstance(value, Mapping):
        raise UnrecognizedSensorShapeError(
            f"Sensor '{label}' value must be a JSON object, got {type(value).__name__}.",
            label=label,
            raw=raw,
        )

    for key in ERROR_FIELDS:
        if key in value:
            message = value[key]
            if not isinstance(message, str):
                raise UnrecognizedSensorShapeError(
                    f"Sensor '{label}' error field '{key}' must be a string.",
                    label=label,
                    raw=raw,
                    details={"field": key, "value": message},
                )
            return SensorError(message)

    missing = [k for k in MEASUREMENT_FIELDS if k not in value]
    if missing:
        raise UnrecognizedSensorShapeError(
            f"Sensor '{label}' has neither an error field nor measurement fields "
            f"(missing: {', '.join(missing)}).",
            label=label,
            raw=raw,
            details={"missing": missing},
        )

    bad = [k for k in MEASUREMENT_FIELDS if not _is_number(value[k])]
    if bad:
        raise UnrecognizedSensorShapeError(
            f"Sensor '{label}' measurement fields must be finite numbers "
            f"(invalid: {', '.join(bad)}).",
            label=label,
            raw=raw,
            details={"invalid": bad},
        )

    return Measurement(**{name: float(value[k]) for k, name in MEASUREMENT_FIELDS.items()})


def decode_line(line: bytes | str, *, timestamp: Optional[datetime] = None) -> Reading:
    """
    Decode one raw line into a Reading.

    Raises:
      EmptyLineError: line is empty / whitespace only
      MalformedLineError: not UTF-8, not JSON, or not a JSON object
      UnrecognizedSensorShapeError: a sensor entry matches neither variant
    """
    if isinstance(line, (bytes, bytearray)):
        try:
            text = bytes(line).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedLineError(
                f"Line is not valid UTF-8: {e.reason} at byte {e.start}.",
                raw=bytes(line),
            ) from None
    else:
        text = line

    text = text.strip()
    if not text:
        raise EmptyLineError("Empty line.", raw=line)

    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedLineError(
            f"Line is not valid JSON: {e.msg} (col {e.colno}).",
            raw=line,
        ) from None
    except (ValueError, RecursionError) as e:
        # nesting too deep for the scanner, or an int literal over the digit limit
        raise MalformedLineError(
            f"Line is not decodable JSON: {type(e).__name__}.",
            raw=line,
        ) from None

    if not isinstance(obj, dict):
        raise MalformedLineError(
            f"Line must be a JSON object, got {type(obj).__name__}.",
            raw=line,
        )

    sensors: Dict[str, SensorResult] = {}
    for label, value in obj.items():
        sensors[label] = decode_sensor(label, value, raw=line)

    if timestamp is None:
        return Reading(sensors=sensors)
    return Reading(sensors=sensors, timestamp=timestamp)


def encode_sensor(result: SensorResult) -> dict:
    if isinstance(result, SensorError):
        return {"error": result.message}
    return {
        wire: getattr(result, name)
        for wire, name in MEASUREMENT_FIELDS.items()
    }


def encode_line(reading: Reading) -> bytes:
    """Encode a Reading back into the compact wire format (newline terminated)."""
    obj = {label: encode_sensor(result) for label, result in reading.items()}
    return (json.dumps(obj, separators=(",", ":")) + "\n").encode("utf-8")
