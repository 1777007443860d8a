# dht_logger/transport/registry.py
from __future__ import annotations

from typing import Dict, Iterator, Optional, Type

from dht_logger.core.errors import ConfigError
from .base import Transport
from .uart import UARTTransport
from .usb import USBTransport


class TransportDriverRegistry:
    """
    Serial drivers selectable by the `driver:` config key.

    build() turns (driver, port, baudrate, timeout) into an unopened line
    transport, reporting an unknown driver or a constructor mismatch as a
    ConfigError before any port is touched.
    """

    def __init__(self, drivers: Optional[Dict[str, Type[Transport]]] = None):
        self._drivers: Dict[str, Type[Transport]] = {}
        for key, cls in (drivers or {}).items():
            self.register(key, cls)

    @classmethod
    def default(cls) -> "TransportDriverRegistry":
        return cls({"uart": UARTTransport, "usb": USBTransport})

    def register(self, driver: str, transport_cls: Type[Transport]) -> None:
        self._drivers[driver.strip().lower()] = transport_cls

    def __contains__(self, driver: str) -> bool:
        return driver.strip().lower() in self._drivers

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._drivers))

    def build(self, driver: str, *, port: str, baudrate: int, timeout: float) -> Transport:
        transport_cls = self._drivers.get(driver.strip().lower())
        if transport_cls is None:
            raise ConfigError(
                f"Unknown serial driver '{driver}'.",
                hint=f"Valid drivers: {list(self)}",
                details={"driver": driver},
            )

        try:
            return transport_cls(port=port, baudrate=baudrate, timeout=timeout)
        except TypeError as e:
            raise ConfigError(
                f"Serial driver '{driver}' does not accept port/baudrate/timeout.",
                details={"driver": driver, "error": str(e)},
            ) from None
