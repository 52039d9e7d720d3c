from __future__ import annotations

from typing import Any, Optional

import requests
from loguru import logger

from market_gateway.config import GatewayConfig
from market_gateway.core.exceptions import ErrorMessages, RequestValidationError
from market_gateway.providers.base import ProviderClient, build_query, require_symbol


class FinnhubClient(ProviderClient):
    """Stock quote, candle and company profile lookups against Finnhub."""

    def __init__(
        self, config: GatewayConfig, *, session: Optional[requests.Session] = None
    ) -> None:
        super().__init__("finnhub", config, session=session)
        if not self.api_key:
            logger.warning("Finnhub API key not configured; fetches will fail")

    @property
    def api_key(self) -> str:
        return self.config.finnhub_key

    def _url(self, path: str, **params: Any) -> str:
        query = build_query({**params, "token": self.api_key})
        return f"{self.config.finnhub_base_url}/{path}?{query}"

    def quote_url(self, symbol: Any) -> str:
        symbol = require_symbol(symbol)
        return self._url("quote", symbol=symbol)

    def candles_url(self, symbol: Any, resolution: Any, from_: Any, to: Any) -> str:
        symbol = require_symbol(symbol)
        if not resolution or not from_ or not to:
            raise RequestValidationError(ErrorMessages.MISSING_CANDLE_FIELDS)
        return self._url(
            "stock/candle",
            symbol=symbol,
            resolution=resolution,
            **{"from": from_, "to": to},
        )

    def profile_url(self, symbol: Any) -> str:
        symbol = require_symbol(symbol)
        return self._url("stock/profile2", symbol=symbol)

    async def quote(self, symbol: Any) -> Any:
        return await self._fetch(self.quote_url(symbol))

    async def candles(self, symbol: Any, resolution: Any, from_: Any, to: Any) -> Any:
        return await self._fetch(self.candles_url(symbol, resolution, from_, to))

    async def profile(self, symbol: Any) -> Any:
        return await self._fetch(self.profile_url(symbol))
