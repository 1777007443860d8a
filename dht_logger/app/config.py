# dht_logger/app/config.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from dht_logger.core.errors import ConfigError

DEFAULT_BAUD = 115200
DEFAULT_TIMEOUT_S = 4.0
DEFAULT_DRIVER = "uart"

_TOP_LEVEL_KEYS = {"port", "baud", "driver", "timeout_s", "iterations", "sinks", "logger_config"}


@dataclass(frozen=True)
class SinkConfig:
    type: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DhtLoggerConfig:
    """
    Static configuration consumed by the runner.

    Example YAML:

        port: /dev/ttyUSB0
        baud: 115200
        timeout_s: 4.0
        iterations: null      # run forever
        sinks:
          - type: log
            verbose: true
          - type: jsonl
            path: data/readings.jsonl
    """
    port: str
    baud: int = DEFAULT_BAUD
    driver: str = DEFAULT_DRIVER
    timeout_s: float = DEFAULT_TIMEOUT_S
    iterations: Optional[int] = None
    sinks: Tuple[SinkConfig, ...] = (SinkConfig("log", {"verbose": True}),)


# ---------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------
def _fail(message: str, *, key: str, value: Any = None, hint: str | None = None) -> ConfigError:
    return ConfigError(message, hint=hint, details={"key": key, "value": value})


def _get_port(raw: Mapping[str, Any]) -> str:
    port = raw.get("port")
    if not isinstance(port, str) or not port.strip():
        raise _fail(
            "Config is missing the serial 'port'.",
            key="port",
            value=port,
            hint="Set e.g. `port: /dev/ttyUSB0` (Linux) or `port: COM3` (Windows).",
        )
    return port


def _get_positive_int(raw: Mapping[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = raw.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise _fail(f"Config '{key}' must be a positive integer, got {value!r}.", key=key, value=value)
    return value


def _get_timeout(raw: Mapping[str, Any]) -> float:
    value = raw.get("timeout_s", DEFAULT_TIMEOUT_S)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise _fail(
            f"Config 'timeout_s' must be a positive number of seconds, got {value!r}.",
            key="timeout_s",
            value=value,
        )
    return float(value)


def _get_driver(raw: Mapping[str, Any]) -> str:
    value = raw.get("driver", DEFAULT_DRIVER)
    if not isinstance(value, str) or not value.strip():
        raise _fail(f"Config 'driver' must be a string, got {value!r}.", key="driver", value=value)
    return value.strip().lower()


def _parse_sinks(value: Any) -> Tuple[SinkConfig, ...]:
    if not isinstance(value, list):
        raise _fail("Config 'sinks' must be a list of sink entries.", key="sinks", value=value)

    sinks = []
    for i, entry in enumerate(value):
        if not isinstance(entry, dict):
            raise _fail(f"Sink entry #{i} must be a mapping.", key=f"sinks[{i}]", value=entry)
        params = dict(entry)
        sink_type = params.pop("type", None)
        if not isinstance(sink_type, str) or not sink_type.strip():
            raise _fail(
                f"Sink entry #{i} is missing 'type'.",
                key=f"sinks[{i}].type",
                value=sink_type,
                hint="Valid types: log, console, jsonl, csv, udp",
            )
        sinks.append(SinkConfig(type=sink_type.strip().lower(), params=params))
    return tuple(sinks)


def _parse_legacy_logger_config(value: Any) -> Tuple[SinkConfig, ...]:
    """Translate the older `logger_config: {verbose, udp}` block into sinks."""
    if not isinstance(value, dict):
        raise _fail("Config 'logger_config' must be a mapping.", key="logger_config", value=value)

    unknown = set(value) - {"verbose", "udp"}
    if unknown:
        raise _fail(
            f"Unknown logger_config keys: {sorted(unknown)}.",
            key="logger_config",
            value=sorted(unknown),
            hint="logger_config supports 'verbose' and 'udp'; use 'sinks' for anything else.",
        )

    verbose = value.get("verbose", False)
    if not isinstance(verbose, bool):
        raise _fail(
            f"logger_config.verbose must be boolean, got {verbose!r}.",
            key="logger_config.verbose",
            value=verbose,
        )

    sinks = [SinkConfig("log", {"verbose": verbose})]

    udp = value.get("udp", [])
    if not isinstance(udp, list):
        raise _fail("logger_config.udp must be a list.", key="logger_config.udp", value=udp)
    if udp:
        sinks.append(SinkConfig("udp", {"addresses": list(udp)}))
    return tuple(sinks)


# ---------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------
def config_from_mapping(raw: Any) -> DhtLoggerConfig:
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping.", details={"value": raw})

    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown config keys: {sorted(unknown)}.",
            hint=f"Valid keys: {sorted(_TOP_LEVEL_KEYS)}",
            details={"keys": sorted(unknown)},
        )

    if "sinks" in raw and "logger_config" in raw:
        raise ConfigError(
            "Config has both 'sinks' and 'logger_config'.",
            hint="Move the logger_config options into the 'sinks' list.",
        )

    kwargs: Dict[str, Any] = {
        "port": _get_port(raw),
        "baud": _get_positive_int(raw, "baud", DEFAULT_BAUD),
        "driver": _get_driver(raw),
        "timeout_s": _get_timeout(raw),
        "iterations": _get_positive_int(raw, "iterations", None),
    }
    if "sinks" in raw:
        kwargs["sinks"] = _parse_sinks(raw["sinks"])
    elif "logger_config" in raw:
        kwargs["sinks"] = _parse_legacy_logger_config(raw["logger_config"])

    return DhtLoggerConfig(**kwargs)


def load_config(path: str | Path) -> DhtLoggerConfig:
    full_path = Path(path)
    if not full_path.exists():
        raise ConfigError(
            f"Config file not found: {full_path}",
            hint="Pass an existing YAML file with -c/--config.",
            details={"path": str(full_path)},
        )

    try:
        with open(full_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"YAML parse error in {full_path}.",
            hint=str(e),
            details={"path": str(full_path)},
        ) from None

    return config_from_mapping(raw or {})
