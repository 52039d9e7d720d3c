from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from market_gateway import APP_VERSION
from market_gateway.settings import Settings, get_settings


@dataclass(frozen=True)
class GatewayConfig:
    """
    Immutable per-process configuration injected into the dispatcher and
    provider clients.

    Attributes:
        finnhub_key (str): Finnhub API token; empty disables every action.
        exchange_rate_key (str): ExchangeRate-API key; empty disables every action.
        finnhub_base_url (str): Finnhub REST root.
        exchange_rate_base_url (str): ExchangeRate-API REST root.
        http_timeout (float | None): Per-request timeout; None keeps transport defaults.
        user_agent (str): Outbound User-Agent header.
        version (str): Service version reported by health probes.
    """

    finnhub_key: str = ""
    exchange_rate_key: str = ""
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    exchange_rate_base_url: str = "https://v6.exchangerate-api.com/v6"
    http_timeout: Optional[float] = None
    user_agent: str = f"market-gateway/{APP_VERSION}"
    version: str = APP_VERSION

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "GatewayConfig":
        settings = settings or get_settings()
        providers = settings.providers
        return cls(
            finnhub_key=providers.finnhub_key or "",
            exchange_rate_key=providers.exchange_rate_key or "",
            finnhub_base_url=providers.finnhub_base_url,
            exchange_rate_base_url=providers.exchange_rate_base_url,
            http_timeout=settings.http.timeout,
            user_agent=settings.http.user_agent,
        )

    @property
    def missing_keys(self) -> tuple[str, ...]:
        """Names of the provider key variables that are unset."""
        required = {
            "FINNHUB_KEY": self.finnhub_key,
            "EXCHANGE_RATE_KEY": self.exchange_rate_key,
        }
        return tuple(name for name, value in required.items() if not value)

    @property
    def keys_configured(self) -> bool:
        return not self.missing_keys


__all__ = ["GatewayConfig"]
