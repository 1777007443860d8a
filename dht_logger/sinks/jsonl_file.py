# dht_logger/sinks/jsonl_file.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, TextIO

from dht_logger.core.errors import SinkError
from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.reading import Reading


class JsonLinesFileSink(ReadingSink):
    """
    Append readings to a JSON-lines file, one record per line.

    The file is opened lazily on the first write (parent dirs created) and
    flushed after every record so an unplugged logger loses at most one line.
    """

    name = "jsonl"

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._f: Optional[TextIO] = None
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> TextIO:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        return open(self._path, "a", encoding="utf-8")

    def write(self, reading: Reading) -> None:
        if self._closed:
            raise SinkError(f"write to closed sink {self.name}", details={"path": str(self._path)})

        line = json.dumps(reading.as_dict(), ensure_ascii=False)
        try:
            if self._f is None:
                self._f = self._open()
            self._f.write(line + "\n")
            self._f.flush()
        except OSError as e:
            raise SinkError(
                f"could not append to {self._path}: {e}",
                details={"path": str(self._path)},
            ) from e

    def close(self) -> None:
        self._closed = True
        f, self._f = self._f, None
        if f is not None:
            f.close()
