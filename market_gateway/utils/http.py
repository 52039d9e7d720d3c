from __future__ import annotations

import asyncio
import time
from functools import partial
from typing import Any, Dict, Iterable, Optional

import requests
from loguru import logger

from market_gateway.core.exceptions import ErrorMessages, NetworkError, ParseError
from market_gateway.utils.json_codec import load_json

# ------------------------------------------------------------------------------
# Header / logging helpers
# ------------------------------------------------------------------------------


def _merge_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"Accept": "application/json"}
    if headers:
        merged.update(headers)
    return merged


def redact_url(url: str, secrets: Iterable[Optional[str]]) -> str:
    """Mask every secret (API key) embedded in a URL before it is logged."""
    out = url
    for secret in secrets:
        if secret:
            out = out.replace(secret, "***")
    return out


def _log_http_event(
    *,
    level: str,
    url: str,
    status: int,
    start_time: float,
    note: str = "",
) -> None:
    latency_ms = round((time.perf_counter() - start_time) * 1000.0, 1)
    logger.log(
        level,
        "[http] method=GET url={} status={} latency_ms={:.1f} {}",
        url,
        status,
        latency_ms,
        note,
    )


# ------------------------------------------------------------------------------
# JSON fetch (single attempt, no retry)
# ------------------------------------------------------------------------------


def _get_text(
    url: str,
    *,
    headers: Optional[Dict[str, str]],
    session: Optional[requests.Session],
    timeout: Optional[float],
) -> tuple[int, str]:
    client = session or requests
    resp = client.get(url, headers=_merge_headers(headers), timeout=timeout)
    # Bodies are UTF-8 regardless of the charset the upstream advertises
    return resp.status_code, resp.content.decode("utf-8", errors="replace")


async def fetch_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    redact: Iterable[Optional[str]] = (),
) -> Any:
    """GET ``url`` and return the parsed JSON body.

    The blocking request runs in the loop's default executor so the calling
    task suspends until the full body has arrived. The HTTP status is not
    inspected; upstream error payloads are returned like any other JSON.

    Raises:
        NetworkError: the connection failed (DNS, TLS, reset, timeout).
        ParseError: the body is not valid JSON.
    """
    safe_url = redact_url(url, redact)
    start_time = time.perf_counter()
    loop = asyncio.get_running_loop()
    try:
        status, text = await loop.run_in_executor(
            None,
            partial(_get_text, url, headers=headers, session=session, timeout=timeout),
        )
    except requests.RequestException as exc:
        # requests embeds the request path (and so the token) in its messages
        detail = redact_url(str(exc), redact)
        _log_http_event(
            level="WARNING",
            url=safe_url,
            status=599,
            start_time=start_time,
            note=f"error={detail}",
        )
        raise NetworkError(f"{ErrorMessages.NETWORK_ERROR}: {detail}") from exc

    try:
        payload = load_json(text)
    except ValueError as exc:
        _log_http_event(
            level="WARNING",
            url=safe_url,
            status=status,
            start_time=start_time,
            note="non-json",
        )
        logger.debug("Non-JSON response for {}: {}", safe_url, (text or "")[:400])
        raise ParseError(f"{ErrorMessages.PARSE_ERROR}: {exc}") from exc

    _log_http_event(
        level="INFO" if 200 <= status < 300 else "WARNING",
        url=safe_url,
        status=status,
        start_time=start_time,
        note="ok" if 200 <= status < 300 else "non-2xx",
    )
    return payload


__all__ = ["fetch_json", "redact_url"]
