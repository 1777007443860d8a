# dht_logger/interfaces/reading_sink.py
from typing import Protocol
from dht_logger.model.reading import Reading


class ReadingSink(Protocol):
    name: str

    def write(self, reading: Reading) -> None: ...
    def close(self) -> None: ...
