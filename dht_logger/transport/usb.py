# dht_logger/transport/usb.py
from __future__ import annotations

import time

from .uart import UARTTransport


class USBTransport(UARTTransport):
    """
    USB CDC line transport implemented via pyserial.

    Same read_line() semantics as UARTTransport. Optionally toggles DTR/RTS on
    open to reset boards that reboot on a new connection (Arduino-style), then
    waits for the firmware to start printing again.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        timeout: float = 4.0,
        max_line_bytes: int = 1024,
        assert_dtr: bool = True,
        reset_delay_s: float = 0.1,
        post_reset_delay_s: float = 2.0,
    ):
        super().__init__(port, baudrate=baudrate, timeout=timeout, max_line_bytes=max_line_bytes)
        self.assert_dtr = assert_dtr
        self.reset_delay_s = reset_delay_s
        self.post_reset_delay_s = post_reset_delay_s

    def _after_open(self) -> None:
        if not self.assert_dtr:
            return

        self.ser.dtr = False
        self.ser.rts = False
        time.sleep(self.reset_delay_s)

        self.ser.dtr = True
        self.ser.rts = True
        # boot banner / partial lines from before the reset are noise
        time.sleep(self.post_reset_delay_s)
        self.ser.reset_input_buffer()
