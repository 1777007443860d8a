# dht_logger/transport/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Transport(ABC):
    """
    Abstract line-oriented transport (UART, USB CDC, ...).

    Contract:
      - open()/close() manage the underlying connection.
      - read_line() blocks up to the configured timeout and returns one complete
        line with the terminator stripped (possibly b"" for a blank line).
      - read_line() raises TransportTimeout if no complete line arrived in time,
        and TransportIOError on hard failure or when the transport is not open.
    """

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def read_line(self) -> bytes: ...

    @property
    def name(self) -> str:
        return type(self).__name__

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
