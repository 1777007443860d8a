# dht_logger/sinks/registry.py
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from dht_logger.core.errors import SinkConfigError
from dht_logger.interfaces.reading_sink import ReadingSink
from .console import ConsoleSink
from .csv_file import CsvFileSink
from .jsonl_file import JsonLinesFileSink
from .logging_sink import LoggingSink
from .udp import UdpSink

SinkBuilder = Callable[[Mapping[str, Any]], ReadingSink]


def _check_keys(sink_type: str, params: Mapping[str, Any], allowed: set[str]) -> None:
    for key in params:
        if key not in allowed:
            raise SinkConfigError(
                f"Unknown param '{key}' for sink '{sink_type}'.",
                hint=f"Valid params: {sorted(allowed)}",
                details={"type": sink_type, "param": key},
            )


def _get_bool(sink_type: str, params: Mapping[str, Any], key: str, default: bool) -> bool:
    value = params.get(key, default)
    if not isinstance(value, bool):
        raise SinkConfigError(
            f"Sink '{sink_type}' param '{key}' must be boolean, got {value!r}.",
            details={"type": sink_type, "param": key, "value": value},
        )
    return value


def _get_path(sink_type: str, params: Mapping[str, Any]) -> str:
    value = params.get("path")
    if not isinstance(value, str) or not value.strip():
        raise SinkConfigError(
            f"Sink '{sink_type}' requires a non-empty 'path'.",
            hint="Add e.g. `path: data/readings.log` to the sink entry.",
            details={"type": sink_type},
        )
    return value


def _build_log(params: Mapping[str, Any]) -> ReadingSink:
    _check_keys("log", params, {"verbose"})
    return LoggingSink(verbose=_get_bool("log", params, "verbose", False))


def _build_console(params: Mapping[str, Any]) -> ReadingSink:
    _check_keys("console", params, {"pretty"})
    return ConsoleSink(pretty=_get_bool("console", params, "pretty", False))


def _build_jsonl(params: Mapping[str, Any]) -> ReadingSink:
    _check_keys("jsonl", params, {"path"})
    return JsonLinesFileSink(_get_path("jsonl", params))


def _build_csv(params: Mapping[str, Any]) -> ReadingSink:
    _check_keys("csv", params, {"path"})
    return CsvFileSink(_get_path("csv", params))


def _build_udp(params: Mapping[str, Any]) -> ReadingSink:
    _check_keys("udp", params, {"addresses"})
    addrs = params.get("addresses")
    if isinstance(addrs, str):
        addrs = [addrs]
    if not isinstance(addrs, list):
        raise SinkConfigError(
            "Sink 'udp' requires 'addresses' as a list of IP:PORT strings.",
            details={"type": "udp", "value": addrs},
        )
    return UdpSink(addrs)


class SinkRegistry:
    """
    Maps sink type keys -> builders taking the sink's config params.

    Keys are case-insensitive. Builders validate their own params and raise
    SinkConfigError on anything they do not understand.
    """

    def __init__(self, builders: Dict[str, SinkBuilder]):
        self._builders: Dict[str, SinkBuilder] = {k.lower(): v for k, v in builders.items()}

    @classmethod
    def default(cls) -> "SinkRegistry":
        return cls(
            builders={
                "log": _build_log,
                "console": _build_console,
                "jsonl": _build_jsonl,
                "csv": _build_csv,
                "udp": _build_udp,
            }
        )

    def has(self, sink_type: str) -> bool:
        return sink_type.lower() in self._builders

    def names(self) -> list[str]:
        return sorted(self._builders)

    def create(self, sink_type: str, params: Mapping[str, Any] | None = None) -> ReadingSink:
        key = sink_type.lower()
        if key not in self._builders:
            raise SinkConfigError(
                f"Unknown sink type '{sink_type}'.",
                hint=f"Valid types: {self.names()}",
                details={"type": sink_type},
            )
        return self._builders[key](dict(params or {}))
