# dht_logger/sinks/udp.py
from __future__ import annotations

import ipaddress
import json
import socket
from typing import Iterable, List, Optional, Tuple

from dht_logger.core.errors import SinkConfigError, SinkError
from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.reading import Reading

Address = Tuple[str, int]


def parse_address(value: str) -> Address:
    """Parse an "IPv4:PORT" string."""
    if not isinstance(value, str) or ":" not in value:
        raise SinkConfigError(
            f"Invalid UDP address {value!r}.",
            hint="Use the form IP:PORT, e.g. 192.168.1.10:9000.",
            details={"value": value},
        )

    host, _, port_s = value.rpartition(":")
    try:
        ipaddress.IPv4Address(host)
        port = int(port_s)
    except ValueError:
        raise SinkConfigError(
            f"Invalid UDP address {value!r}.",
            hint="Use the form IP:PORT, e.g. 192.168.1.10:9000.",
            details={"value": value},
        ) from None

    if not 0 < port < 65536:
        raise SinkConfigError(
            f"UDP port out of range in {value!r}.",
            details={"value": value, "port": port},
        )
    return host, port


class UdpSink(ReadingSink):
    """
    Send each reading as one compact JSON datagram to every configured address.

    All addresses are attempted; if any send fails a single SinkError listing
    the failed addresses is raised afterwards.
    """

    name = "udp"

    def __init__(self, addresses: Iterable[str], *, sock: Optional[socket.socket] = None):
        self._addrs: List[Address] = [parse_address(a) for a in addresses]
        if not self._addrs:
            raise SinkConfigError("UDP sink needs at least one address.")
        self._sock = sock
        self._own_sock = sock is None
        self._closed = False

    @property
    def addresses(self) -> List[Address]:
        return list(self._addrs)

    def _socket(self) -> socket.socket:
        if self._sock is None:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        return self._sock

    def write(self, reading: Reading) -> None:
        if self._closed:
            raise SinkError(f"write to closed sink {self.name}")

        data = json.dumps(reading.as_dict(), separators=(",", ":")).encode("utf-8")
        sock = self._socket()

        failed = {}
        for addr in self._addrs:
            try:
                sock.sendto(data, addr)
            except OSError as e:
                failed[f"{addr[0]}:{addr[1]}"] = str(e)

        if failed:
            raise SinkError(
                f"UDP send failed for {len(failed)}/{len(self._addrs)} address(es).",
                details={"failed": failed},
            )

    def close(self) -> None:
        self._closed = True
        sock, self._sock = self._sock, None
        if sock is not None and self._own_sock:
            sock.close()
