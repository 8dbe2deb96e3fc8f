from __future__ import annotations

import asyncio

from pyproj import Geod

from app.core.errors import InternalError, UnknownAirportError
from app.data.airports_repo import AirportsRepo, airports_repo, AirportLocation

# Great-circle distances on a sphere, not the WGS84 ellipsoid
SPHERE_GEOD = Geod(ellps="sphere")


class GeoDistanceProvider:
    """
    Airport-pair distances in meters.
    The first call loads the coordinate table in a worker thread so the
    event loop keeps serving other requests while the file is read.
    """

    def __init__(self, repo: AirportsRepo = airports_repo):
        self.repo = repo

    async def ensure_loaded(self) -> None:
        if self.repo.loaded:
            return
        try:
            await asyncio.to_thread(self.repo.load)
        except OSError as e:
            raise InternalError(f"airport table unavailable: {e}") from e

    def _lookup(self, code: str) -> AirportLocation:
        loc = self.repo.get(code)
        if loc is None:
            raise UnknownAirportError(code)
        return loc

    async def distance(self, code1: str, code2: str) -> float:
        await self.ensure_loaded()
        start = self._lookup(code1)
        end = self._lookup(code2)
        _, _, meters = SPHERE_GEOD.inv(start.lon, start.lat, end.lon, end.lat)
        return float(meters)


geo_distance = GeoDistanceProvider()
