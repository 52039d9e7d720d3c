from __future__ import annotations

from typing import Any, Optional

import requests
from loguru import logger

from market_gateway.config import GatewayConfig
from market_gateway.core.exceptions import ErrorMessages, RequestValidationError
from market_gateway.providers.base import ProviderClient, encode_component


class ExchangeRateClient(ProviderClient):
    """Latest currency rates from ExchangeRate-API.

    The upstream returns the full rate table for the base currency. The target
    currency is validated but not sent; callers pick it out of
    ``conversion_rates`` themselves.
    """

    def __init__(
        self, config: GatewayConfig, *, session: Optional[requests.Session] = None
    ) -> None:
        super().__init__("exchangerate", config, session=session)
        if not self.api_key:
            logger.warning("ExchangeRate-API key not configured; fetches will fail")

    @property
    def api_key(self) -> str:
        return self.config.exchange_rate_key

    def latest_url(self, from_currency: Any, to_currency: Any) -> str:
        if not from_currency or not isinstance(from_currency, str):
            raise RequestValidationError(ErrorMessages.MISSING_FROM_CURRENCY)
        if not to_currency or not isinstance(to_currency, str):
            raise RequestValidationError(ErrorMessages.MISSING_TO_CURRENCY)
        base = self.config.exchange_rate_base_url
        return f"{base}/{self.api_key}/latest/{encode_component(from_currency)}"

    async def latest(self, from_currency: Any, to_currency: Any) -> Any:
        return await self._fetch(self.latest_url(from_currency, to_currency))
