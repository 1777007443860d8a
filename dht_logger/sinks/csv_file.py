# dht_logger/sinks/csv_file.py
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from dht_logger.core.errors import SinkError
from dht_logger.interfaces.reading_sink import ReadingSink
from dht_logger.model.reading import Measurement, Reading

FIELDNAMES = ["timestamp", "sensor", "status", "temperature", "humidity", "heat_index", "error"]


class CsvFileSink(ReadingSink):
    """
    Append readings to a CSV file, one row per sensor per reading.

    The header is written only when the file is new or empty, so restarts keep
    appending to the same table. An empty reading writes no rows.
    """

    name = "csv"

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._f: Optional[TextIO] = None
        self._writer: Optional[csv.DictWriter] = None
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        new_file = not self._path.exists() or self._path.stat().st_size == 0
        self._f = open(self._path, "a", newline="", encoding="utf-8")
        self._writer = csv.DictWriter(self._f, fieldnames=FIELDNAMES)
        if new_file:
            self._writer.writeheader()

    @staticmethod
    def _build_rows(reading: Reading) -> List[Dict[str, Any]]:
        ts = reading.timestamp.isoformat()
        rows: List[Dict[str, Any]] = []
        for label, result in sorted(reading.items(), key=lambda kv: kv[0]):
            row: Dict[str, Any] = {"timestamp": ts, "sensor": label}
            if isinstance(result, Measurement):
                row.update(status="ok", **result.as_dict())
            else:
                row.update(status="error", error=result.message)
            rows.append(row)
        return rows

    def write(self, reading: Reading) -> None:
        if self._closed:
            raise SinkError(f"write to closed sink {self.name}", details={"path": str(self._path)})

        try:
            if self._writer is None:
                self._open()
            for row in self._build_rows(reading):
                self._writer.writerow(row)
            self._f.flush()
        except OSError as e:
            raise SinkError(
                f"could not append to {self._path}: {e}",
                details={"path": str(self._path)},
            ) from e

    def close(self) -> None:
        self._closed = True
        f, self._f = self._f, None
        self._writer = None
        if f is not None:
            f.close()
