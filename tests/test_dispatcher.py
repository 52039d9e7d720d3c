from __future__ import annotations

import base64
import json
import logging
from dataclasses import replace

import pytest
import requests

from market_gateway.core.exceptions import ErrorMessages
from market_gateway.dispatcher import RequestDispatcher, parse_event_body
from market_gateway.providers import ExchangeRateClient, FinnhubClient

VALID_REQUESTS = {
    "quote": {"action": "quote", "symbol": "AAPL"},
    "candles": {
        "action": "candles",
        "symbol": "AAPL",
        "resolution": "D",
        "from": 1_700_000_000,
        "to": 1_700_600_000,
    },
    "profile": {"action": "profile", "symbol": "AAPL"},
    "exchange": {"action": "exchange", "fromCurrency": "USD", "toCurrency": "JPY"},
}


def make_event(body) -> dict:
    return {"body": body if isinstance(body, str) else json.dumps(body)}


def error_of(result: dict) -> str:
    return json.loads(result["body"])["error"]


@pytest.mark.anyio
@pytest.mark.parametrize("action", sorted(VALID_REQUESTS))
async def test_valid_request_relays_upstream_payload(config, upstream, action):
    upstream.payload = {"c": 189.5, "name": "アップル", "rates": [1, 2.5, None]}

    result = await RequestDispatcher(config).dispatch(make_event(VALID_REQUESTS[action]))

    assert result == {
        "statusCode": 200,
        "body": '{"c":189.5,"name":"アップル","rates":[1,2.5,null]}',
    }
    assert len(upstream.calls) == 1


@pytest.mark.anyio
async def test_upstream_numbers_are_rendered_like_js(config, fake_session):
    session = fake_session(
        200,
        '{"c":150.0,"marketCapitalization":2500000000000.0,"rate":0.00003931,'
        '"tiny":1.5e-7,"id":12345678901234567890}',
    )
    dispatcher = RequestDispatcher(config, finnhub=FinnhubClient(config, session=session))

    result = await dispatcher.dispatch(make_event(VALID_REQUESTS["quote"]))

    assert result == {
        "statusCode": 200,
        "body": '{"c":150,"marketCapitalization":2500000000000,"rate":0.00003931,'
        '"tiny":1.5e-7,"id":12345678901234567000}',
    }


@pytest.mark.anyio
async def test_upstream_log_lines_carry_action_and_provider(config, fake_session, caplog):
    caplog.set_level(logging.INFO)
    session = fake_session(200, '{"name":"Apple Inc"}')
    dispatcher = RequestDispatcher(config, finnhub=FinnhubClient(config, session=session))

    await dispatcher.dispatch(make_event(VALID_REQUESTS["profile"]))

    http_records = [r for r in caplog.records if r.getMessage().startswith("[http]")]
    assert len(http_records) == 1
    assert http_records[0].action == "profile"
    assert http_records[0].provider == "finnhub"
    assert "finn-key" not in http_records[0].getMessage()


@pytest.mark.anyio
async def test_each_action_reaches_its_endpoint(config, upstream):
    dispatcher = RequestDispatcher(config)

    for action in ("quote", "candles", "profile", "exchange"):
        await dispatcher.dispatch(make_event(VALID_REQUESTS[action]))

    assert upstream.urls == [
        "https://finnhub.test/api/v1/quote?symbol=AAPL&token=finn-key",
        "https://finnhub.test/api/v1/stock/candle?symbol=AAPL&resolution=D"
        "&from=1700000000&to=1700600000&token=finn-key",
        "https://finnhub.test/api/v1/stock/profile2?symbol=AAPL&token=finn-key",
        "https://fx.test/v6/fx-key/latest/USD",
    ]


@pytest.mark.anyio
@pytest.mark.parametrize("missing", ["finnhub_key", "exchange_rate_key"])
@pytest.mark.parametrize(
    "body",
    [*VALID_REQUESTS.values(), {"action": "bogus"}, {}, "not json at all"],
)
async def test_missing_key_rejects_every_request(config, upstream, missing, body):
    dispatcher = RequestDispatcher(replace(config, **{missing: ""}))

    result = await dispatcher.dispatch(make_event(body))

    assert result == {
        "statusCode": 500,
        "body": '{"error":"APIキーが設定されていません"}',
    }
    assert upstream.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [{}, {"action": None}, {"action": ""}, {"action": 1}, {"action": ["quote"]}, [1, 2], "42"],
)
async def test_missing_or_non_string_action_is_a_client_error(config, upstream, body):
    result = await RequestDispatcher(config).dispatch(make_event(body))

    assert result == {"statusCode": 400, "body": '{"error":"無効なアクションです"}'}
    assert upstream.calls == []


@pytest.mark.anyio
async def test_unknown_action_names_the_action(config, upstream):
    result = await RequestDispatcher(config).dispatch(make_event({"action": "bogus"}))

    assert result["statusCode"] == 400
    assert error_of(result) == "不正なアクション: bogus"
    assert upstream.calls == []


@pytest.mark.anyio
async def test_action_match_is_exact(config, upstream):
    result = await RequestDispatcher(config).dispatch(
        make_event({"action": "Quote", "symbol": "AAPL"})
    )

    assert result["statusCode"] == 400
    assert "Quote" in error_of(result)


@pytest.mark.anyio
@pytest.mark.parametrize("body", [{"action": "quote"}, {"action": "quote", "symbol": ""}])
async def test_quote_without_symbol_is_a_server_error(config, upstream, body):
    result = await RequestDispatcher(config).dispatch(make_event(body))

    assert result == {"statusCode": 500, "body": '{"error":"シンボルが指定されていません"}'}
    assert upstream.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("field", ["resolution", "from", "to"])
async def test_candles_missing_field_is_a_server_error(config, upstream, field):
    body = dict(VALID_REQUESTS["candles"])
    del body[field]

    result = await RequestDispatcher(config).dispatch(make_event(body))

    assert result["statusCode"] == 500
    assert error_of(result) == ErrorMessages.MISSING_CANDLE_FIELDS
    for name in ("resolution", "from", "to"):
        assert name in error_of(result)


@pytest.mark.anyio
async def test_exchange_missing_to_currency(config, upstream):
    result = await RequestDispatcher(config).dispatch(
        make_event({"action": "exchange", "fromCurrency": "USD"})
    )

    assert result["statusCode"] == 500
    assert error_of(result) == ErrorMessages.MISSING_TO_CURRENCY


@pytest.mark.anyio
async def test_malformed_body_is_a_server_error(config, upstream):
    result = await RequestDispatcher(config).dispatch({"body": "{not json"})

    assert result["statusCode"] == 500
    assert error_of(result).startswith(f"{ErrorMessages.BODY_PARSE_ERROR}: ")
    assert upstream.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("event", [{}, {"body": None}, {"body": "null"}, None])
async def test_missing_or_null_body_is_a_server_error(config, upstream, event):
    result = await RequestDispatcher(config).dispatch(event)

    assert result["statusCode"] == 500
    assert error_of(result).startswith(ErrorMessages.BODY_PARSE_ERROR)


@pytest.mark.anyio
async def test_non_json_upstream_is_a_parse_error(config, fake_session):
    session = fake_session(200, "<html>rate limited</html>")
    dispatcher = RequestDispatcher(config, finnhub=FinnhubClient(config, session=session))

    result = await dispatcher.dispatch(make_event(VALID_REQUESTS["quote"]))

    assert result["statusCode"] == 500
    message = error_of(result)
    assert message.startswith(f"{ErrorMessages.PARSE_ERROR}: ")
    assert "Expecting value" in message


@pytest.mark.anyio
async def test_connection_failure_is_a_network_error(config, fake_session):
    session = fake_session(
        error=requests.ConnectionError("Failed to resolve 'fx.test'")
    )
    dispatcher = RequestDispatcher(
        config, exchange=ExchangeRateClient(config, session=session)
    )

    result = await dispatcher.dispatch(make_event(VALID_REQUESTS["exchange"]))

    assert result["statusCode"] == 500
    assert error_of(result) == f"{ErrorMessages.NETWORK_ERROR}: Failed to resolve 'fx.test'"


@pytest.mark.anyio
async def test_upstream_error_payload_is_relayed_as_success(config, fake_session):
    session = fake_session(401, '{"error":"Invalid API key."}')
    dispatcher = RequestDispatcher(config, finnhub=FinnhubClient(config, session=session))

    result = await dispatcher.dispatch(make_event(VALID_REQUESTS["profile"]))

    assert result == {"statusCode": 200, "body": '{"error":"Invalid API key."}'}


@pytest.mark.anyio
async def test_unexpected_exception_maps_to_500(config, upstream):
    upstream.error = RuntimeError("boom")

    result = await RequestDispatcher(config).dispatch(make_event(VALID_REQUESTS["quote"]))

    assert result == {"statusCode": 500, "body": '{"error":"boom"}'}


@pytest.mark.anyio
async def test_identical_requests_yield_identical_envelopes(config, upstream):
    upstream.payload = {"c": 1.5, "h": 2, "l": 1, "o": 1.2, "pc": 1.4}
    dispatcher = RequestDispatcher(config)
    event = make_event(VALID_REQUESTS["quote"])

    first = await dispatcher.dispatch(event)
    second = await dispatcher.dispatch(event)

    assert first == second
    assert first["body"].encode("utf-8") == second["body"].encode("utf-8")


@pytest.mark.anyio
async def test_base64_encoded_body_is_decoded(config, upstream):
    raw = json.dumps(VALID_REQUESTS["profile"]).encode("utf-8")
    event = {"body": base64.b64encode(raw).decode("ascii"), "isBase64Encoded": True}

    result = await RequestDispatcher(config).dispatch(event)

    assert result["statusCode"] == 200
    assert upstream.urls == [
        "https://finnhub.test/api/v1/stock/profile2?symbol=AAPL&token=finn-key"
    ]


def test_parse_event_body_accepts_bytes():
    assert parse_event_body({"body": b'{"action":"quote"}'}) == {"action": "quote"}


def test_parse_event_body_treats_non_objects_as_empty():
    assert parse_event_body({"body": '["quote"]'}) == {}


def test_dispatcher_exposes_known_actions(config):
    assert RequestDispatcher(config).actions == ("quote", "candles", "profile", "exchange")
