#!/usr/bin/env python3
from __future__ import annotations

import csv
import io
import sys
from pathlib import Path
import httpx

OPENFLIGHTS_AIRPORTS_DAT = "https://raw.githubusercontent.com/jpatokal/openflights/master/data/airports.dat"

OUT_PATH = Path("app/data/airports.dat")

# Columns the ranker reads: 1 name, 2 city, 3 country, 4 IATA, 6 lat, 7 lon
IATA_COL = 4
LAT_COL = 6
LON_COL = 7
NULL = "\\N"


def keep_row(row: list[str]) -> bool:
    """
    OpenFlights rows without an IATA code carry '\\N' in that column.
    Those can never be looked up by the ranker, so drop them here.
    """
    if len(row) <= LON_COL:
        return False
    iata = row[IATA_COL].strip()
    if not iata or iata == NULL:
        return False
    return bool(row[LAT_COL].strip() and row[LON_COL].strip())


def main() -> int:
    print(f"[download] {OPENFLIGHTS_AIRPORTS_DAT}")
    r = httpx.get(OPENFLIGHTS_AIRPORTS_DAT, timeout=30.0, follow_redirects=True)
    r.raise_for_status()

    rows = [row for row in csv.reader(io.StringIO(r.text)) if keep_row(row)]
    if not rows:
        print("[error] no usable rows in download", file=sys.stderr)
        return 1

    OUT_PATH.parent.mkdir(parents=True, exist_ok=True)

    # Same headerless layout as the source so the loader reads either file
    with OUT_PATH.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerows(rows)

    print(f"[ok] wrote {len(rows):,} airports -> {OUT_PATH.as_posix()}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
