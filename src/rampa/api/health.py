"""Health check endpoints."""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request

from rampa.core.errors import PersistenceError

router = APIRouter(tags=["health"])

_START_TIME = time.monotonic()


@router.get("/api/health")
async def health() -> dict[str, str]:
    """Basic health check -- always returns quickly."""
    return {"status": "ok"}


@router.get("/api/health/detailed")
async def health_detailed(request: Request) -> dict[str, Any]:
    """Detailed health check with store status."""
    from rampa import __version__

    checks: dict[str, Any] = {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round(time.monotonic() - _START_TIME, 1),
        "components": {},
    }

    try:
        await request.app.state.store.get(request.app.state.config.storage.posts_key)
        checks["components"]["store"] = {"status": "ok"}
    except PersistenceError as e:
        checks["status"] = "degraded"
        checks["components"]["store"] = {"status": "error", "detail": str(e)}

    return checks
