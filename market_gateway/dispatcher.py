"""Request dispatcher: key check, body parse, action routing, envelope mapping."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from loguru import logger

from market_gateway.config import GatewayConfig
from market_gateway.core.exceptions import (
    ConfigError,
    ErrorMessages,
    GatewayError,
    InvalidActionError,
    RequestBodyError,
    envelope,
)
from market_gateway.logging_utils import logging_context
from market_gateway.providers import ExchangeRateClient, FinnhubClient
from market_gateway.utils.json_codec import load_json

Route = Callable[[Mapping[str, Any]], Awaitable[Any]]


def _body_error(detail: str) -> RequestBodyError:
    return RequestBodyError(f"{ErrorMessages.BODY_PARSE_ERROR}: {detail}")


def parse_event_body(event: Any) -> Mapping[str, Any]:
    """Decode and parse the JSON body of a gateway event.

    A body that parses to something other than a JSON object yields an empty
    mapping, which then fails action validation.

    Raises:
        RequestBodyError: the body is missing, undecodable, invalid JSON or ``null``.
    """
    body = event.get("body") if isinstance(event, Mapping) else None
    if body is None:
        raise _body_error("request body is missing")

    if isinstance(event, Mapping) and event.get("isBase64Encoded") and isinstance(body, str):
        try:
            body = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise _body_error(str(exc)) from exc

    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _body_error(str(exc)) from exc

    try:
        parsed = load_json(body)
    except (TypeError, ValueError) as exc:
        raise _body_error(str(exc)) from exc

    if parsed is None:
        raise _body_error("request body is null")
    if not isinstance(parsed, Mapping):
        return {}
    return parsed


class RequestDispatcher:
    """Routes one gateway event to a provider call and wraps the outcome.

    Every outcome, success or failure, is a ``{"statusCode", "body"}``
    envelope whose body is JSON text. Nothing is kept between calls.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        finnhub: Optional[FinnhubClient] = None,
        exchange: Optional[ExchangeRateClient] = None,
    ) -> None:
        self.config = config
        self.finnhub = finnhub or FinnhubClient(config)
        self.exchange = exchange or ExchangeRateClient(config)
        self._routes: Dict[str, Route] = {
            "quote": lambda req: self.finnhub.quote(req.get("symbol")),
            "candles": lambda req: self.finnhub.candles(
                req.get("symbol"), req.get("resolution"), req.get("from"), req.get("to")
            ),
            "profile": lambda req: self.finnhub.profile(req.get("symbol")),
            "exchange": lambda req: self.exchange.latest(
                req.get("fromCurrency"), req.get("toCurrency")
            ),
        }

    @property
    def actions(self) -> tuple[str, ...]:
        return tuple(self._routes)

    async def dispatch(self, event: Any) -> Dict[str, Any]:
        try:
            return await self._dispatch(event)
        except GatewayError as exc:
            logger.warning(
                "dispatch failed kind={} status={} error={}",
                exc.kind.value,
                exc.http_status,
                exc.message,
            )
            return exc.to_envelope()
        except Exception as exc:
            logger.exception("dispatch failed unexpectedly: {}", exc)
            return envelope(500, {"error": str(exc)})

    async def _dispatch(self, event: Any) -> Dict[str, Any]:
        # Checked per request so a dispatcher built without keys never calls out
        if not self.config.keys_configured:
            raise ConfigError(ErrorMessages.MISSING_KEY)

        request = parse_event_body(event)

        action = request.get("action")
        if not action or not isinstance(action, str):
            raise InvalidActionError(ErrorMessages.INVALID_ACTION)

        route = self._routes.get(action)
        if route is None:
            raise InvalidActionError(f"{ErrorMessages.UNKNOWN_ACTION}: {action}")

        with logging_context(action=action):
            logger.debug("dispatching")
            result = await route(request)
        return envelope(200, result)


__all__ = ["RequestDispatcher", "parse_event_body"]
