from .base import Transport
from .errors import TransportError, TransportOpenError, TransportIOError, TransportTimeout
from .uart import UARTTransport
from .usb import USBTransport
from .registry import TransportDriverRegistry

__all__ = ["Transport",
           "TransportError",
           "TransportOpenError",
           "TransportIOError",
           "TransportTimeout",
           "UARTTransport",
           "USBTransport",
           "TransportDriverRegistry"]
