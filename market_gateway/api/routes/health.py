from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from market_gateway.handler import get_dispatcher

router = APIRouter(tags=["health"])


@router.get("")
async def health() -> Dict[str, Any]:
    """
    Legacy health endpoint.

    Returns:
        Dict[str, Any]: A dictionary with the health status.
    """
    return await health_live()


@router.get("/live")
async def health_live() -> Dict[str, Any]:
    """
    A lightweight liveness probe.

    Returns:
        Dict[str, Any]: A dictionary with the service status and version.
    """
    return {
        "ok": True,
        "service": "market-gateway",
        "version": get_dispatcher().config.version,
    }


@router.get("/ready")
async def health_ready() -> Dict[str, Any]:
    """
    Readiness probe: degraded while either provider key is missing, since
    every action is rejected in that state.
    """
    missing = list(get_dispatcher().config.missing_keys)
    return {
        "status": "degraded" if missing else "ok",
        "utc": datetime.now(timezone.utc).isoformat(),
        "missing": missing,
    }
