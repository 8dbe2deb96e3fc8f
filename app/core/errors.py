"""Exception types for the flight ranker and their HTTP mapping."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# nginx convention for "client went away before we answered"
CLIENT_CLOSED_REQUEST = 499


class FlightRankerError(Exception):
    """Base exception for all flight ranker errors."""


class ValidationError(FlightRankerError):
    """Raised when search query parameters are invalid."""


class UnknownAirportError(FlightRankerError):
    """Raised when a distance lookup names an airport missing from the table."""

    def __init__(self, code: str):
        super().__init__(f"Unknown airport code: {code!r}")
        self.code = code


class MalformedRecordError(FlightRankerError):
    """Raised when a catalog entry cannot be turned into a flight record."""


class SearchCancelledError(FlightRankerError):
    """Raised when the caller abandoned a search while the stream was consumed."""


class ConfigError(FlightRankerError):
    """Raised when configuration is invalid."""


class InternalError(FlightRankerError):
    """Anything else. Never shown to clients in detail."""


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def _cancelled_handler(request: Request, exc: SearchCancelledError) -> Response:
    logger.info("search cancelled by client: %s", request.url.path)
    return Response(status_code=CLIENT_CLOSED_REQUEST)


async def _internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(SearchCancelledError, _cancelled_handler)
    app.add_exception_handler(FlightRankerError, _internal_error_handler)
    app.add_exception_handler(Exception, _internal_error_handler)
