# dht_logger/model/reading.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, Tuple, Union


@dataclass(frozen=True)
class Measurement:
    """
    A successful DHT measurement.

    All three values are finite floats; no range checks are applied, so
    sub-zero temperatures and odd heat indices pass through untouched.
    """
    temperature: float
    humidity: float
    heat_index: float

    def __post_init__(self) -> None:
        for name in ("temperature", "humidity", "heat_index"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"{name} must be a number, got {type(value).__name__}")
            try:
                finite = math.isfinite(value)
            except OverflowError:
                finite = False
            if not finite:
                raise ValueError(f"{name} must be a finite float")
            object.__setattr__(self, name, float(value))

    def as_dict(self) -> dict:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "heat_index": self.heat_index,
        }


@dataclass(frozen=True)
class SensorError:
    """The sensor reported a fault instead of data."""
    message: str

    def __post_init__(self) -> None:
        if not isinstance(self.message, str):
            raise TypeError(f"message must be a string, got {type(self.message).__name__}")

    def as_dict(self) -> dict:
        return {"error": self.message}


SensorResult = Union[Measurement, SensorError]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Reading:
    """
    One polling cycle worth of sensor results, keyed by sensor label.

    sensors: label -> Measurement | SensorError (may be empty)
    timestamp: UTC time the line was decoded
    """
    sensors: Dict[str, SensorResult] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        for label, result in self.sensors.items():
            if not isinstance(label, str):
                raise TypeError(f"Sensor label must be a string, got {type(label).__name__}")
            if not isinstance(result, (Measurement, SensorError)):
                raise TypeError(
                    f"Sensor '{label}' result must be Measurement or SensorError, "
                    f"got {type(result).__name__}"
                )

    def __len__(self) -> int:
        return len(self.sensors)

    def __iter__(self) -> Iterator[str]:
        return iter(self.sensors)

    def __getitem__(self, label: str) -> SensorResult:
        return self.sensors[label]

    @property
    def is_empty(self) -> bool:
        return not self.sensors

    @property
    def measurements(self) -> Dict[str, Measurement]:
        return {k: v for k, v in self.sensors.items() if isinstance(v, Measurement)}

    @property
    def errors(self) -> Dict[str, SensorError]:
        return {k: v for k, v in self.sensors.items() if isinstance(v, SensorError)}

    def items(self) -> Iterator[Tuple[str, SensorResult]]:
        return iter(self.sensors.items())

    def as_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "sensors": {label: result.as_dict() for label, result in self.sensors.items()},
        }
