# dht_logger/transport/errors.py
from __future__ import annotations

class TransportError(Exception):
    """Base class for transport-layer failures."""

class TransportOpenError(TransportError):
    pass

class TransportIOError(TransportError):
    """Hard I/O failure; the link is gone until reopened."""

class TransportTimeout(TransportError):
    """No complete line arrived within the read timeout."""
