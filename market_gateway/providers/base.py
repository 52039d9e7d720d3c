from __future__ import annotations

import abc
import math
from typing import Any, Mapping, Optional
from urllib.parse import quote

import requests

from market_gateway.config import GatewayConfig
from market_gateway.core.exceptions import ErrorMessages, RequestValidationError
from market_gateway.logging_utils import logging_context
from market_gateway.utils import http
from market_gateway.utils.json_codec import number_to_string

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_component(value: Any) -> str:
    return quote(format_value(value), safe=_URI_COMPONENT_SAFE)


def format_value(value: Any) -> str:
    """Render a query value the way a JS template literal would."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return number_to_string(value)
    return str(value)


def build_query(params: Mapping[str, Any]) -> str:
    return "&".join(f"{key}={encode_component(value)}" for key, value in params.items())


def require_symbol(symbol: Any) -> str:
    if not symbol or not isinstance(symbol, str):
        raise RequestValidationError(ErrorMessages.INVALID_SYMBOL)
    return symbol


class ProviderClient(abc.ABC):
    """Base class for upstream JSON providers.

    Subclasses validate their inputs synchronously, build a URL and hand it to
    :meth:`_fetch`; upstream payloads are returned unchanged.
    """

    name: str

    def __init__(
        self,
        name: str,
        config: GatewayConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.name = name
        self.config = config
        self.session = session

    @property
    @abc.abstractmethod
    def api_key(self) -> str:
        """Credential embedded in every upstream URL."""

    async def _fetch(self, url: str) -> Any:
        with logging_context(provider=self.name):
            return await http.fetch_json(
                url,
                headers={"User-Agent": self.config.user_agent},
                session=self.session,
                timeout=self.config.http_timeout,
                redact=(self.api_key,),
            )
