from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from market_gateway.utils.json_codec import dump_json


class ErrorMessages:
    """Fixed user-facing error messages returned in response bodies."""

    MISSING_KEY = "APIキーが設定されていません"
    INVALID_ACTION = "無効なアクションです"
    UNKNOWN_ACTION = "不正なアクション"
    INVALID_SYMBOL = "シンボルが指定されていません"
    MISSING_FROM_CURRENCY = "fromCurrencyが指定されていません"
    MISSING_TO_CURRENCY = "toCurrencyが指定されていません"
    MISSING_CANDLE_FIELDS = "resolution, from, toは必須です"
    BODY_PARSE_ERROR = "リクエストボディのパースに失敗しました"
    NETWORK_ERROR = "ネットワークエラーが発生しました"
    PARSE_ERROR = "JSONパースエラーが発生しました"


class ErrorKind(str, Enum):
    CONFIG = "config"
    REQUEST_BODY = "request_body"
    INVALID_ACTION = "invalid_action"
    VALIDATION = "validation"
    NETWORK = "network"
    PARSE = "parse"
    INTERNAL = "internal"


def envelope(status_code: int, payload: Any) -> Dict[str, Any]:
    return {"statusCode": status_code, "body": dump_json(payload)}


class GatewayError(Exception):
    """Base class for all gateway errors.

    Every subclass pins a ``kind`` and the HTTP status it maps to, so turning
    any raised error into a response envelope never depends on optional
    attributes.
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_envelope(self) -> Dict[str, Any]:
        return envelope(self.http_status, {"error": self.message})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class ConfigError(GatewayError):
    """Raised when a required API key is missing."""

    kind = ErrorKind.CONFIG


class RequestBodyError(GatewayError):
    """Raised when the event body is not valid JSON."""

    kind = ErrorKind.REQUEST_BODY


class InvalidActionError(GatewayError):
    """Raised for a missing, non-string or unknown action."""

    kind = ErrorKind.INVALID_ACTION
    http_status = 400


class RequestValidationError(GatewayError):
    """Raised by provider adapters before any network call."""

    kind = ErrorKind.VALIDATION


class NetworkError(GatewayError):
    """Raised when the upstream connection fails."""

    kind = ErrorKind.NETWORK


class ParseError(GatewayError):
    """Raised when an upstream body is not valid JSON."""

    kind = ErrorKind.PARSE


__all__ = [
    "ErrorMessages",
    "ErrorKind",
    "GatewayError",
    "ConfigError",
    "RequestBodyError",
    "InvalidActionError",
    "RequestValidationError",
    "NetworkError",
    "ParseError",
    "envelope",
]
