from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from app.core.config import settings
from app.core.errors import ConfigError

SUPPORTED_SUFFIXES = (".jsonl", ".csv")

# A JSON Lines entry stays undecoded text until the record is parsed, so one
# bad line fails that record only and the stream can keep going.
RawRecord = Union[str, Dict[str, str]]


class FlightCatalog:
    """
    Persisted flight catalog, read lazily one entry at a time.

    Supported formats:
      - .jsonl: one JSON object per line, blank lines ignored
      - .csv: header row with departureTime, arrivalTime, carrier, origin, destination
    Each call to stream() opens the file afresh; the returned iterator itself
    can only be consumed once.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else settings.flight_catalog_path
        suffix = self.path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ConfigError(
                f"Unsupported catalog format {suffix or '(none)'!r}; expected one of {SUPPORTED_SUFFIXES}"
            )
        self.suffix = suffix

    def stream(self) -> Iterator[RawRecord]:
        if not self.path.exists():
            raise FileNotFoundError(f"Flight catalog not found at {self.path}")
        if self.suffix == ".jsonl":
            return self._stream_jsonl()
        return self._stream_csv()

    def _stream_jsonl(self) -> Iterator[str]:
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield line

    def _stream_csv(self) -> Iterator[Dict[str, str]]:
        with self.path.open("r", encoding="utf-8", newline="") as f:
            for row in csv.DictReader(f):
                yield dict(row)
