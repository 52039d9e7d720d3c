from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Optional

import pytest

os.environ.setdefault("ENV", "test")

from market_gateway.config import GatewayConfig  # noqa: E402
from market_gateway.logging_utils import setup_test_logging  # noqa: E402
from market_gateway.utils import http  # noqa: E402


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.content = text.encode("utf-8")


class FakeSession:
    """Stands in for requests.Session; records every GET."""

    def __init__(
        self,
        response: Optional[FakeResponse] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.response = response or FakeResponse(200, "{}")
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class StubUpstream:
    """Replacement for ``http.fetch_json`` returning a canned payload."""

    def __init__(self) -> None:
        self.payload: Any = {"ok": True}
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, url: str, **kwargs: Any) -> Any:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.payload

    @property
    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    setup_test_logging()
    yield


@pytest.fixture
def anyio_backend():
    """Force anyio-powered async tests to run under asyncio backend only."""
    return "asyncio"


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(
        finnhub_key="finn-key",
        exchange_rate_key="fx-key",
        finnhub_base_url="https://finnhub.test/api/v1",
        exchange_rate_base_url="https://fx.test/v6",
    )


@pytest.fixture
def upstream(monkeypatch: pytest.MonkeyPatch) -> StubUpstream:
    stub = StubUpstream()
    monkeypatch.setattr(http, "fetch_json", stub)
    return stub


@pytest.fixture
def fake_session() -> Callable[..., FakeSession]:
    def _make(status_code: int = 200, text: str = "{}", error: Optional[Exception] = None):
        return FakeSession(FakeResponse(status_code, text), error=error)

    return _make
