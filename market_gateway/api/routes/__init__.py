"""
Aggregate API routes for the market gateway dev server.
"""

from __future__ import annotations

from fastapi import APIRouter

from .analyze import router as analyze_router
from .health import router as health_router


def mount(api: APIRouter) -> None:
    """Attach the health probes and the /analyze relay to ``api``."""
    api.include_router(health_router, prefix="/health")
    api.include_router(analyze_router)


__all__ = ["mount", "analyze_router", "health_router"]
