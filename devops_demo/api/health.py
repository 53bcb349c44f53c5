from __future__ import annotations

from datetime import datetime, timezone
from time import monotonic

from fastapi import APIRouter

from devops_demo.models.schemas import HealthResponse, ReadyResponse


router = APIRouter(tags=["health"])

# Module import happens at process start-up, before the server binds.
_IMPORTED_AT = monotonic()


def utc_timestamp() -> str:
    """ISO 8601 UTC timestamp with millisecond precision, e.g. 2026-01-01T00:00:00.000Z."""

    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def process_uptime() -> float:
    """Seconds since this module was imported, on a monotonic clock."""

    return max(0.0, monotonic() - _IMPORTED_AT)


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(timestamp=utc_timestamp(), uptime=process_uptime())


@router.api_route("/ready", methods=["GET", "HEAD"], response_model=ReadyResponse)
async def ready() -> ReadyResponse:
    return ReadyResponse(timestamp=utc_timestamp())
