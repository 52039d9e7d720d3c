"""Loguru setup for the gateway.

Every line carries the invocation's ``request_id`` plus the ``action`` being
dispatched and the upstream ``provider`` being called, bound with
:func:`logging_context`. Records are mirrored onto the stdlib root logger so
host log collectors, Sentry's logging integration and pytest's ``caplog`` see
them too.
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Optional

from loguru import logger

from market_gateway import APP_VERSION

CONTEXT_FIELDS = ("request_id", "action", "provider")

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | "
    "req={extra[request_id]} action={extra[action]} provider={extra[provider]} | "
    "{extra[environment]}@{extra[service_version]} | {message}"
)

_configured = False


def _forward_to_stdlib(message) -> None:
    record = message.record
    exc = record["exception"]
    std_record = logging.getLogger(record["name"]).makeRecord(
        record["name"],
        record["level"].no,
        record["file"].path,
        record["line"],
        record["message"],
        (),
        (exc.type, exc.value, exc.traceback) if exc else None,
        func=record["function"],
        extra=dict(record["extra"]),
    )
    logging.getLogger().handle(std_record)


def setup_logging(
    *, force: bool = False, level: Optional[str] = None, stream: Any = None
) -> None:
    """Install the console sink and stdlib bridge once per process.

    ``level`` falls back to ``LOG_LEVEL`` then INFO. ``stream`` defaults to
    stdout; the CLI passes stderr so its JSON output stays clean.
    """
    global _configured
    if _configured and not force:
        return

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logger.remove()
    logger.configure(
        extra={
            **{field: "-" for field in CONTEXT_FIELDS},
            "environment": os.getenv("ENV", "local"),
            "service_version": APP_VERSION,
        }
    )
    logger.add(stream or sys.stdout, level=log_level, format=_LOG_FORMAT, diagnose=False)
    logger.add(_forward_to_stdlib, level=log_level, diagnose=False)
    logging.getLogger().setLevel(getattr(logging, log_level, logging.INFO))
    _configured = True


def setup_test_logging(level: Optional[str] = None) -> None:
    """Verbose logging for the test session; ``PYTEST_LOGLEVEL`` overrides DEBUG."""
    setup_logging(force=True, level=level or os.getenv("PYTEST_LOGLEVEL") or "DEBUG")


@contextmanager
def logging_context(**values: Optional[str]):
    """Bind context fields (request_id, action, provider) to nested log lines."""
    with logger.contextualize(**{key: value or "-" for key, value in values.items()}):
        yield


__all__ = ["CONTEXT_FIELDS", "setup_logging", "setup_test_logging", "logging_context"]
