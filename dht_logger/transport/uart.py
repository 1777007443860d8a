# dht_logger/transport/uart.py
from __future__ import annotations

from typing import Optional

import serial
from serial import SerialException

from .base import Transport
from .errors import TransportIOError, TransportOpenError, TransportTimeout

LINE_TERMINATOR = b"\n"


class UARTTransport(Transport):
    """
    UART line transport implemented via pyserial.

    read_line() reads up to the next newline. Bytes received before a timeout
    are kept and completed by the next call, so a line split across a timeout
    is never delivered in two pieces. A line that reaches max_line_bytes
    without a terminator is returned as is.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        timeout: float = 4.0,
        max_line_bytes: int = 1024,
    ):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.max_line_bytes = max_line_bytes
        self.ser: Optional[serial.Serial] = None
        self._pending = b""

    @property
    def name(self) -> str:
        return self.port

    def open(self) -> None:
        try:
            self.ser = serial.Serial(
                self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
            )
            self.ser.reset_input_buffer()
            self._after_open()
        except SerialException as e:
            self.ser = None
            raise TransportOpenError(f"could not open serial port {self.port!r}: {e}") from None
        self._pending = b""

    def _after_open(self) -> None:
        return None

    def close(self) -> None:
        self._pending = b""
        if self.ser is not None:
            try:
                self.ser.close()
            finally:
                self.ser = None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def read_line(self) -> bytes:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        try:
            chunk = self.ser.read_until(LINE_TERMINATOR, self.max_line_bytes - len(self._pending))
        except (SerialException, OSError) as e:
            self.ser = None
            self._pending = b""
            raise TransportIOError(f"serial read failed on {self.port!r}: {e}") from None

        buf = self._pending + chunk
        if buf.endswith(LINE_TERMINATOR):
            self._pending = b""
            return buf.rstrip(b"\r\n")

        if len(buf) >= self.max_line_bytes:
            # overlong: hand it over so the decoder can report it
            self._pending = b""
            return buf

        self._pending = buf
        raise TransportTimeout(
            f"no complete line on {self.port!r} within {self.timeout}s "
            f"({len(buf)} bytes pending)"
        )
