"""Candidate filter and composite scorer.

Units: durations are seconds, distances are meters. The composite score is
``duration_seconds * carrier_factor + distance_meters``; lower is better.
"""

from __future__ import annotations

from app.core.config import settings
from app.core.errors import MalformedRecordError
from app.models.flights import FlightRecord, ScoredCandidate, SearchQuery
from app.services.geo_distance import GeoDistanceProvider

NO_PREFERENCE_FACTOR = 1.0


def passes_filter(record: FlightRecord, query: SearchQuery, require_preferred_carrier: bool = False) -> bool:
    if record.origin != query.departure_airport:
        return False
    if record.departure_time > query.departure_cutoff:
        return False
    if query.max_duration is not None and record.duration.total_seconds() > query.max_duration:
        return False
    if require_preferred_carrier and query.preferred_carrier is not None:
        return record.carrier == query.preferred_carrier
    return True


def carrier_factor(record: FlightRecord, query: SearchQuery, preferred_factor: float) -> float:
    if query.preferred_carrier is not None and record.carrier == query.preferred_carrier:
        return preferred_factor
    return NO_PREFERENCE_FACTOR


async def score_candidate(
    record: FlightRecord,
    query: SearchQuery,
    geo: GeoDistanceProvider,
    sequence: int,
    preferred_factor: float = settings.preferred_carrier_factor,
) -> ScoredCandidate:
    """
    Raises MalformedRecordError for a flight that lands before it departs,
    and lets UnknownAirportError from the distance lookup through.
    """
    duration = record.duration.total_seconds()
    if duration < 0:
        raise MalformedRecordError(
            f"{record.carrier} {record.origin}->{record.destination} arrives before it departs"
        )

    distance = await geo.distance(query.departure_airport, record.destination)
    score = duration * carrier_factor(record, query, preferred_factor) + distance

    return ScoredCandidate(
        score=score,
        distance=distance,
        duration=duration,
        sequence=sequence,
        record=record,
    )
