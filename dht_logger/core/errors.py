# dht_logger/core/errors.py
from __future__ import annotations


class DhtLoggerError(Exception):
    """
    Base class for all expected operational errors in the DHT logger.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, log filtering, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no hardware access yet)
# ---------------------------------------------------------------------------

class ConfigError(DhtLoggerError):
    """
    Logger configuration file is missing, unreadable or invalid.

    Examples:
      - config file not found
      - YAML syntax error
      - missing serial port
      - non-positive iteration count
    """
    code = "config_error"


class SinkConfigError(ConfigError):
    """
    A sink entry in the configuration cannot be turned into a sink.

    Examples:
      - unknown sink type
      - missing file path
      - invalid UDP address
    """
    code = "sink_config_error"


# ---------------------------------------------------------------------------
# Transport / connection lifecycle errors
# ---------------------------------------------------------------------------

class DeviceConnectError(DhtLoggerError):
    """
    Serial port could not be opened.

    Examples:
      - port not found
      - permission denied
      - device already in use
    """
    code = "device_connect_error"


class DeviceDisconnectedError(DhtLoggerError):
    """
    Device was previously connected but is no longer reachable.

    Examples:
      - USB unplugged
      - UART cable removed
      - OS-level I/O error during read
    """
    code = "device_disconnected"


# ---------------------------------------------------------------------------
# Line decoding errors (recoverable, never escape the acquisition loop)
# ---------------------------------------------------------------------------

class DecodeError(DhtLoggerError):
    """
    A line received from the device could not be turned into a Reading.

    The raw line is kept on the exception for diagnosis.
    """
    code = "decode_error"
    kind: str = "decode_error"

    def __init__(self, message: str, *, raw: bytes | str = b"", **kwargs):
        super().__init__(message, **kwargs)
        self.raw = raw


class EmptyLineError(DecodeError):
    """Line is empty or whitespace only. Not an error in practice."""
    code = "empty_line"
    kind = "empty"


class MalformedLineError(DecodeError):
    """
    Line is not a JSON object.

    Examples:
      - truncated JSON after a serial glitch
      - invalid UTF-8
      - top-level array / scalar
    """
    code = "malformed_line"
    kind = "malformed"


class UnrecognizedSensorShapeError(DecodeError):
    """
    A sensor entry matches neither a measurement nor an error report.

    The whole line is rejected; ``label`` names the offending entry.
    """
    code = "unrecognized_sensor_shape"
    kind = "unrecognized_sensor_shape"

    def __init__(self, message: str, *, label: str, raw: bytes | str = b"", **kwargs):
        super().__init__(message, raw=raw, **kwargs)
        self.label = label


# ---------------------------------------------------------------------------
# Sink errors
# ---------------------------------------------------------------------------

class SinkError(DhtLoggerError):
    """
    A sink failed to accept a reading.

    Examples:
      - disk full while appending to a file
      - UDP send failure
      - write after close()
    """
    code = "sink_error"
