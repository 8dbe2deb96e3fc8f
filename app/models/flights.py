from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class FlightRecord(BaseModel):
    """One catalog entry. Timestamps must carry an offset (``Z`` or ``+hh:mm``)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    departure_time: AwareDatetime = Field(..., alias="departureTime")
    arrival_time: AwareDatetime = Field(..., alias="arrivalTime")
    carrier: str = Field(..., min_length=1)
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)

    @property
    def duration(self) -> timedelta:
        return self.arrival_time - self.departure_time


class SearchQuery(BaseModel):
    """A validated search. ``max_duration`` is in seconds."""

    model_config = ConfigDict(frozen=True)

    departure_airport: str
    departure_cutoff: AwareDatetime
    max_duration: Optional[float] = Field(default=None, ge=0)
    preferred_carrier: Optional[str] = None
    limit: int = Field(default=10, ge=1)


class ScoredCandidate(BaseModel):
    """A flight that passed the filter, with its composite score.

    ``duration`` is seconds and ``distance`` is meters; ``score`` is
    ``duration * carrier_factor + distance`` and lower ranks first.
    """

    model_config = ConfigDict(frozen=True)

    score: float
    distance: float
    duration: float
    sequence: int
    record: FlightRecord

    @property
    def sort_key(self) -> tuple[float, int]:
        return (self.score, self.sequence)


class SearchResultItem(BaseModel):
    score: float
    distance: float
    duration: float
    departureTime: datetime
    arrivalTime: datetime
    carrier: str
    origin: str
    destination: str

    @classmethod
    def from_candidate(cls, c: ScoredCandidate) -> "SearchResultItem":
        return cls(
            score=c.score,
            distance=c.distance,
            duration=c.duration,
            departureTime=c.record.departure_time,
            arrivalTime=c.record.arrival_time,
            carrier=c.record.carrier,
            origin=c.record.origin,
            destination=c.record.destination,
        )
