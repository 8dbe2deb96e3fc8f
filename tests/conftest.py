import json
from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import Settings
from app.core.errors import UnknownAirportError
from app.data.airports_repo import AirportsRepo
from app.data.flight_catalog import FlightCatalog
from app.models.flights import FlightRecord, ScoredCandidate, SearchQuery
from app.services.flight_search import FlightSearchService
from app.services.geo_distance import GeoDistanceProvider

AIRPORTS_DAT = """\
3682,"Hartsfield Jackson Atlanta International Airport","Atlanta","United States","ATL","KATL",33.6367,-84.428101,1026,-5,"A","America/New_York","airport","OurAirports"
3878,"Tampa International Airport","Tampa","United States","TPA","KTPA",27.9755,-82.5332,26,-5,"A","America/New_York","airport","OurAirports"
3876,"Charlotte Douglas International Airport","Charlotte","United States","CLT","KCLT",35.214,-80.9431,748,-5,"A","America/New_York","airport","OurAirports"
3797,"John F Kennedy International Airport","New York","United States","JFK","KJFK",40.6398,-73.7789,13,-5,"A","America/New_York","airport","OurAirports"
7001,"Example Heliport","Nowhere","United States",\\N,"00XX",35.0,-85.0,100,-5,"A","America/New_York","heliport","OurAirports"
"""

T0 = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)


class FakeGeo:
    """Distance provider backed by a fixed table, for deterministic scores."""

    def __init__(self, distances):
        self.distances = distances
        self.calls = 0

    async def distance(self, code1, code2):
        self.calls += 1
        try:
            return self.distances[(code1, code2)]
        except KeyError:
            raise UnknownAirportError(code2)


def flight_row(origin="ATL", destination="TPA", carrier="DL", depart_hours=-2.0, minutes=60):
    dep = T0 + timedelta(hours=depart_hours)
    arr = dep + timedelta(minutes=minutes)
    return {
        "departureTime": dep.isoformat().replace("+00:00", "Z"),
        "arrivalTime": arr.isoformat().replace("+00:00", "Z"),
        "carrier": carrier,
        "origin": origin,
        "destination": destination,
    }


def write_jsonl(path, rows):
    with path.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(row if isinstance(row, str) else json.dumps(row))
            f.write("\n")
    return path


@pytest.fixture
def airports_path(tmp_path):
    p = tmp_path / "airports.dat"
    p.write_text(AIRPORTS_DAT, encoding="utf-8")
    return p


@pytest.fixture
def airports(airports_path):
    return AirportsRepo(airports_path)


@pytest.fixture
def geo(airports):
    return GeoDistanceProvider(airports)


@pytest.fixture
def test_settings():
    return Settings(cancel_check_interval=1)


@pytest.fixture
def query():
    return SearchQuery(departure_airport="ATL", departure_cutoff=T0, limit=10)


@pytest.fixture
def make_record():
    def _make(**kwargs):
        return FlightRecord.model_validate(flight_row(**kwargs))
    return _make


@pytest.fixture
def make_candidate(make_record):
    def _make(score, sequence, destination="TPA"):
        return ScoredCandidate(
            score=score,
            distance=0.0,
            duration=score,
            sequence=sequence,
            record=make_record(destination=destination),
        )
    return _make


@pytest.fixture
def make_service(tmp_path, test_settings):
    def _make(rows, geo, settings=None):
        catalog = FlightCatalog(write_jsonl(tmp_path / "flights.jsonl", rows))
        return FlightSearchService(catalog=catalog, geo=geo, settings=settings or test_settings)
    return _make
