from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings, settings as default_settings
from app.core.errors import (
    InternalError,
    MalformedRecordError,
    SearchCancelledError,
    UnknownAirportError,
)
from app.data.flight_catalog import FlightCatalog
from app.models.flights import FlightRecord, ScoredCandidate, SearchQuery
from app.services.geo_distance import GeoDistanceProvider
from app.services.ranking import TopKSelector, clamp_limit
from app.services.scoring import passes_filter, score_candidate

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], Awaitable[bool]]


def parse_record(raw: Union[str, Mapping[str, Any]]) -> FlightRecord:
    """Turn one raw catalog entry (JSON text or a field mapping) into a FlightRecord."""
    try:
        if isinstance(raw, str):
            return FlightRecord.model_validate_json(raw)
        return FlightRecord.model_validate(dict(raw))
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "record" for err in e.errors())
        raise MalformedRecordError(f"invalid flight record ({fields})") from e


class FlightSearchService:
    """
    Streams the catalog through filter -> score -> top-K selection.

    Records are handled strictly one at a time and never collected; memory is
    bounded by the query limit, not the catalog size.
    """

    def __init__(
        self,
        catalog: FlightCatalog,
        geo: GeoDistanceProvider,
        settings: Settings = default_settings,
    ):
        self.catalog = catalog
        self.geo = geo
        self.settings = settings

    async def search(self, query: SearchQuery, is_cancelled: Optional[CancelCheck] = None) -> List[ScoredCandidate]:
        selector = TopKSelector(clamp_limit(query.limit, self.settings.max_limit))
        sequence = itertools.count()
        stats: Dict[str, int] = {"scanned": 0, "eligible": 0, "unknown_airport": 0, "malformed": 0}
        check_every = max(1, self.settings.cancel_check_interval)

        try:
            records = self.catalog.stream()
        except OSError as e:
            raise InternalError(f"flight catalog unavailable: {e}") from e

        for raw in records:
            if is_cancelled is not None and stats["scanned"] % check_every == 0:
                # yield so a client disconnect can be observed
                await asyncio.sleep(0)
                if await is_cancelled():
                    raise SearchCancelledError(f"cancelled after {stats['scanned']} records")
            stats["scanned"] += 1

            try:
                record = parse_record(raw)
                if not passes_filter(record, query, self.settings.require_preferred_carrier):
                    continue
                candidate = await score_candidate(
                    record,
                    query,
                    self.geo,
                    sequence=next(sequence),
                    preferred_factor=self.settings.preferred_carrier_factor,
                )
            except UnknownAirportError as e:
                stats["unknown_airport"] += 1
                logger.debug("skipping record %d: %s", stats["scanned"], e)
                continue
            except MalformedRecordError as e:
                if not self.settings.skip_malformed_records:
                    raise
                stats["malformed"] += 1
                logger.warning("skipping malformed record %d: %s", stats["scanned"], e)
                continue

            stats["eligible"] += 1
            selector.offer(candidate)

        results = selector.drain()
        logger.info(
            "search %s<=%s: scanned=%d eligible=%d unknown_airport=%d malformed=%d returned=%d",
            query.departure_airport,
            query.departure_cutoff.isoformat(),
            stats["scanned"],
            stats["eligible"],
            stats["unknown_airport"],
            stats["malformed"],
            len(results),
        )
        return results
