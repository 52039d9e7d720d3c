"""Financial data gateway: Finnhub and ExchangeRate-API behind one handler."""

import logging
import os
from pathlib import Path

import sentry_sdk
from dotenv import load_dotenv
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

__version__ = "1.0.0"

# Load .env before settings are read so local runs pick up API keys
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")

APP_VERSION = os.getenv("APP_VERSION") or __version__


def init_sentry() -> bool:
    """Start the Sentry SDK when ``SENTRY_DSN`` is configured."""
    from market_gateway.settings import get_sentry_settings

    sentry = get_sentry_settings()
    if not sentry.enabled:
        logging.getLogger(__name__).debug("SENTRY_DSN not set; error reporting off")
        return False

    sentry_sdk.init(
        dsn=sentry.dsn,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=sentry.traces_sample_rate,
        environment=sentry.environment or os.getenv("ENV", "prod"),
        release=APP_VERSION,
    )
    return True


init_sentry()
