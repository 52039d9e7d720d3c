"""Upstream data provider clients."""

from .exchangerate import ExchangeRateClient
from .finnhub import FinnhubClient

__all__ = ["ExchangeRateClient", "FinnhubClient"]
