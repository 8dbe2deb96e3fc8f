from __future__ import annotations

import re
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import AwareDatetime, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.api.deps import get_search_service, rate_limit
from app.core.config import settings
from app.core.errors import ValidationError
from app.models.flights import SearchQuery, SearchResultItem
from app.services.flight_search import FlightSearchService
from app.services.ranking import clamp_limit

router = APIRouter()

_INTEGER_RE = re.compile(r"^[0-9]+$")
# Same ISO-8601 forms the catalog records accept
_AWARE_DATETIME = TypeAdapter(AwareDatetime)


def parse_search_query(
    departure_airport: Optional[str],
    departure: Optional[str],
    limit: Optional[str],
    max_duration: Optional[str] = None,
    preferred_carrier: Optional[str] = None,
) -> SearchQuery:
    """Validate raw query-string values; limit is clamped to [1, max_limit]."""
    departure_airport = (departure_airport or "").strip()
    if not departure_airport:
        raise ValidationError("departureAirport is required")

    if not departure:
        raise ValidationError("departure is required")
    try:
        cutoff = _AWARE_DATETIME.validate_python(departure.strip())
    except PydanticValidationError:
        raise ValidationError(
            f"departure must be an ISO-8601 datetime with a UTC offset, e.g. 2024-01-01T00:00:00Z: {departure!r}"
        )

    limit = (limit or "").strip()
    if not _INTEGER_RE.match(limit):
        raise ValidationError("limit must be a non-negative integer")

    max_duration_s: Optional[float] = None
    if max_duration is not None and max_duration.strip():
        try:
            max_duration_s = float(max_duration)
        except ValueError:
            raise ValidationError(f"maxDuration must be a number of seconds: {max_duration!r}")
        if not max_duration_s >= 0:
            raise ValidationError("maxDuration must be >= 0")

    preferred_carrier = (preferred_carrier or "").strip() or None

    return SearchQuery(
        departure_airport=departure_airport,
        departure_cutoff=cutoff,
        max_duration=max_duration_s,
        preferred_carrier=preferred_carrier,
        limit=clamp_limit(int(limit), settings.max_limit),
    )


@router.get("/search", response_model=List[SearchResultItem])
async def search_flights(
    request: Request,
    departure_airport: Optional[str] = Query(None, alias="departureAirport"),
    departure: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    max_duration: Optional[str] = Query(None, alias="maxDuration", description="Seconds"),
    preferred_carrier: Optional[str] = Query(None, alias="preferredCarrier"),
    _=Depends(rate_limit),
    svc: FlightSearchService = Depends(get_search_service),
):
    query = parse_search_query(
        departure_airport=departure_airport,
        departure=departure,
        limit=limit,
        max_duration=max_duration,
        preferred_carrier=preferred_carrier,
    )
    results = await svc.search(query, is_cancelled=request.is_disconnected)
    return [SearchResultItem.from_candidate(c) for c in results]
