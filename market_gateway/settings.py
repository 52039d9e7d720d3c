"""Centralized gateway settings powered by Pydantic.

Environment matrix:

| Section   | Environment Variable          | Default                              | Purpose                               |
|-----------|-------------------------------|--------------------------------------|---------------------------------------|
| Providers | `FINNHUB_KEY`                 | `None`                               | Finnhub token (alias FINNHUB_API_KEY) |
| Providers | `EXCHANGE_RATE_KEY`           | `None`                               | ExchangeRate-API key                  |
| Providers | `FINNHUB_BASE_URL`            | `https://finnhub.io/api/v1`          | Finnhub REST root                     |
| Providers | `EXCHANGE_RATE_BASE_URL`      | `https://v6.exchangerate-api.com/v6` | ExchangeRate-API REST root            |
| HTTP      | `HTTP_TIMEOUT`                | `None`                               | Per-request timeout in seconds        |
| HTTP      | `HTTP_USER_AGENT`             | `market-gateway/<version>`           | Outbound User-Agent header            |
| Sentry    | `SENTRY_DSN`                  | `None`                               | Sentry ingest DSN                     |
| Sentry    | `SENTRY_TRACES_SAMPLE_RATE`   | `0.0`                                | Fraction of transactions to trace     |
| Sentry    | `SENTRY_ENVIRONMENT`          | `None`                               | Deployment environment label          |

Settings are read from the environment when instantiated and are frozen
afterwards; the gateway builds them once per process.
"""

from __future__ import annotations

import math

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from market_gateway import __version__


class _SettingsBase(BaseSettings):
    """Common configuration for BaseSettings subclasses."""

    model_config = SettingsConfigDict(
        env_prefix="",
        populate_by_name=True,
        extra="ignore",
        case_sensitive=True,
        frozen=True,
    )


class ProviderSettings(_SettingsBase):
    """API credentials and endpoints for the upstream data providers."""

    finnhub_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINNHUB_KEY", "FINNHUB_API_KEY"),
    )
    exchange_rate_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EXCHANGE_RATE_KEY", "EXCHANGE_RATE_API_KEY"),
    )
    finnhub_base_url: str = Field(
        default="https://finnhub.io/api/v1", alias="FINNHUB_BASE_URL"
    )
    exchange_rate_base_url: str = Field(
        default="https://v6.exchangerate-api.com/v6", alias="EXCHANGE_RATE_BASE_URL"
    )

    @field_validator("finnhub_base_url", "exchange_rate_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class HttpSettings(_SettingsBase):
    """Outbound HTTP behaviour."""

    timeout: float | None = Field(default=None, alias="HTTP_TIMEOUT")
    user_agent: str = Field(
        default=f"market-gateway/{__version__}", alias="HTTP_USER_AGENT"
    )

    @field_validator("timeout", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: float | str | None) -> float | None:
        if value in (None, ""):
            return None
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            return None
        return timeout if timeout > 0 else None


class SentrySettings(_SettingsBase):
    """Sentry SDK configuration."""

    dsn: str | None = Field(default=None, alias="SENTRY_DSN")
    traces_sample_rate: float = Field(default=0.0, alias="SENTRY_TRACES_SAMPLE_RATE")
    environment: str | None = Field(default=None, alias="SENTRY_ENVIRONMENT")

    @field_validator("traces_sample_rate", mode="before")
    @classmethod
    def _coerce_sample_rate(cls, value: float | str | None) -> float:
        try:
            rate = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(rate):
            return 0.0
        return min(max(rate, 0.0), 1.0)

    @computed_field
    @property
    def enabled(self) -> bool:
        return bool(self.dsn)


class Settings(BaseModel):
    """Aggregate accessor for domain-specific settings."""

    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
    }


def get_settings() -> Settings:
    """Instantiate settings from the current environment."""
    return Settings()


def reload_settings() -> Settings:
    """Alias for get_settings to maintain a consistent API."""
    return get_settings()


def get_provider_settings() -> ProviderSettings:
    return get_settings().providers


def get_http_settings() -> HttpSettings:
    return get_settings().http


def get_sentry_settings() -> SentrySettings:
    return get_settings().sentry


__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "get_provider_settings",
    "get_http_settings",
    "get_sentry_settings",
    "ProviderSettings",
    "HttpSettings",
    "SentrySettings",
]
