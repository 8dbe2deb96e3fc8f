import time
from typing import Dict
from fastapi import Request, HTTPException, Depends

from app.core.config import settings
from app.data.flight_catalog import FlightCatalog
from app.services.flight_search import FlightSearchService
from app.services.geo_distance import GeoDistanceProvider, geo_distance


# Counts for the current minute only; a new window starts from an empty dict
_rate_window = {"start": 0}
_rate_bucket: Dict[str, int] = {}  # ip -> count in current window

def reset_rate_limit() -> None:
    _rate_window["start"] = 0
    _rate_bucket.clear()

async def rate_limit(request: Request):
    ip = request.client.host if request.client else "unknown"
    now = int(time.time())
    window = now - (now % 60)

    if _rate_window["start"] != window:
        _rate_window["start"] = window
        _rate_bucket.clear()

    count = _rate_bucket.get(ip, 0) + 1
    _rate_bucket[ip] = count

    if count > settings.rate_limit_per_minute:
        raise HTTPException(status_code=429, detail="Rate limit exceeded. Try again in a minute.")

def get_flight_catalog() -> FlightCatalog:
    return FlightCatalog(settings.flight_catalog_path)

def get_geo_distance() -> GeoDistanceProvider:
    # process-wide: the coordinate table is loaded once and shared
    return geo_distance

def get_search_service(
    catalog: FlightCatalog = Depends(get_flight_catalog),
    geo: GeoDistanceProvider = Depends(get_geo_distance),
) -> FlightSearchService:
    return FlightSearchService(catalog=catalog, geo=geo, settings=settings)
