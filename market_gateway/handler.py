"""Serverless entry point.

Deploy ``market_gateway.handler.handler`` as the function handler; each call
handles exactly one event and returns a ``{"statusCode", "body"}`` envelope.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional
from uuid import uuid4

from market_gateway.config import GatewayConfig
from market_gateway.dispatcher import RequestDispatcher
from market_gateway.logging_utils import logging_context, setup_logging

_dispatcher: Optional[RequestDispatcher] = None


def get_dispatcher() -> RequestDispatcher:
    """Return the process-wide dispatcher, reading configuration on first use."""
    global _dispatcher
    if _dispatcher is None:
        setup_logging()
        _dispatcher = RequestDispatcher(GatewayConfig.from_settings())
    return _dispatcher


def reset_dispatcher() -> None:
    global _dispatcher
    _dispatcher = None


def _request_id(context: Any) -> str:
    return getattr(context, "aws_request_id", None) or uuid4().hex


async def handle(event: Any, context: Any = None) -> Dict[str, Any]:
    dispatcher = get_dispatcher()
    with logging_context(request_id=_request_id(context)):
        return await dispatcher.dispatch(event)


def handler(event: Any, context: Any = None) -> Dict[str, Any]:
    return asyncio.run(handle(event, context))


__all__ = ["handler", "handle", "get_dispatcher", "reset_dispatcher"]
