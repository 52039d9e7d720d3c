from __future__ import annotations

from fastapi import APIRouter, Request, Response

from market_gateway.handler import get_dispatcher

router = APIRouter(tags=["analyze"])


@router.post("/analyze")
async def analyze(request: Request) -> Response:
    """Run the raw request body through the dispatcher, as the serverless host would."""
    raw = await request.body()
    event = {"body": raw.decode("utf-8", errors="replace") if raw else None}
    result = await get_dispatcher().dispatch(event)
    return Response(
        content=result["body"],
        status_code=result["statusCode"],
        media_type="application/json",
    )
