from __future__ import annotations

import csv
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

# OpenFlights airports.dat layout (no header row)
COL_NAME = 1
COL_CITY = 2
COL_COUNTRY = 3
COL_IATA = 4
COL_LAT = 6
COL_LON = 7
NULL = "\\N"


@dataclass(frozen=True)
class AirportLocation:
    code: str
    lat: float
    lon: float
    name: str = ""
    city: str = ""
    country: str = ""


class AirportsRepo:
    """
    IATA code -> coordinates, read from an OpenFlights-format table.

    The table is loaded once on first use and never changes afterwards.
    Loading is guarded so that concurrent first callers share a single
    load; after that lookups read the dict without locking.
    """

    def __init__(self, dat_path: Optional[Path] = None):
        self.dat_path = Path(dat_path) if dat_path is not None else settings.airports_path
        self._by_code: Dict[str, AirportLocation] = {}
        self._lock = threading.Lock()
        self._loaded = False
        self.load_count = 0

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._by_code = self._read_table()
            self.load_count += 1
            self._loaded = True
        logger.info("loaded %d airports from %s", len(self._by_code), self.dat_path)

    def _read_table(self) -> Dict[str, AirportLocation]:
        if not self.dat_path.exists():
            raise FileNotFoundError(
                f"Airport dataset not found at {self.dat_path}. "
                f"Run scripts/build_airports_dat.py to download it."
            )

        out: Dict[str, AirportLocation] = {}
        with self.dat_path.open("r", encoding="utf-8", newline="") as f:
            for row in csv.reader(f):
                if len(row) <= COL_LON:
                    continue
                code = row[COL_IATA].strip().upper()
                if not code or code == NULL:
                    continue
                try:
                    lat = float(row[COL_LAT])
                    lon = float(row[COL_LON])
                except ValueError:
                    logger.debug("skipping %s: bad coordinates %r", code, row[COL_LAT:COL_LON + 1])
                    continue
                # Later rows win, same as a plain dict build
                out[code] = AirportLocation(
                    code=code,
                    lat=lat,
                    lon=lon,
                    name=row[COL_NAME].strip(),
                    city=row[COL_CITY].strip(),
                    country=row[COL_COUNTRY].strip(),
                )
        return out

    def get(self, code: str) -> Optional[AirportLocation]:
        self.load()
        return self._by_code.get((code or "").strip().upper())

    def __len__(self) -> int:
        self.load()
        return len(self._by_code)


# singleton repo for the app
airports_repo = AirportsRepo()
