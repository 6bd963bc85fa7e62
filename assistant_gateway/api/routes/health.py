"""
Health Router

GET /health reports liveness, the running version, uptime and how many tools
startup discovery registered.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from assistant_gateway import __version__
from assistant_gateway.api.deps import get_registry
from assistant_gateway.tools.registry import ToolRegistry


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    uptime_seconds: float
    timestamp: str
    tools: int


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    registry: ToolRegistry = Depends(get_registry),
) -> HealthResponse:
    """Liveness check; always 200 while the process serves requests."""
    started_at = getattr(request.app.state, "started_at", None)
    uptime = time.monotonic() - started_at if started_at is not None else 0.0
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(uptime, 3),
        timestamp=datetime.now(timezone.utc).isoformat(),
        tools=len(registry),
    )
