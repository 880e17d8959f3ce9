from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient


def _finnhub_transport(prices: dict[str, Any], *, failing: set[str] | None = None) -> httpx.MockTransport:
    failing = failing or set()

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/quote")
        assert request.url.params["token"] == "test-key"
        symbol = request.url.params["symbol"]
        if symbol in failing:
            return httpx.Response(429, text="limit")
        return httpx.Response(200, json={"c": prices.get(symbol), "d": 1.5, "dp": 0.8, "pc": 100.0})

    return httpx.MockTransport(handler)


@pytest.fixture
def fake_finnhub(monkeypatch: pytest.MonkeyPatch):
    """Route every quote request through an in-memory transport."""
    from core import finnhub

    real_build_client = finnhub.build_client
    state: dict[str, Any] = {"prices": {}, "failing": set()}

    def build_client(**kwargs: Any) -> httpx.AsyncClient:
        kwargs["transport"] = _finnhub_transport(state["prices"], failing=state["failing"])
        return real_build_client(**kwargs)

    monkeypatch.setattr(finnhub, "build_client", build_client)
    return state


def test_parse_symbols_trims_drops_blanks_and_caps() -> None:
    from quotes.service import parse_symbols

    assert parse_symbols(" AAPL, ,msft ,", max_symbols=40) == ["AAPL", "msft"]
    assert parse_symbols(",".join(f"S{i}" for i in range(50)), max_symbols=40)[-1] == "S39"
    assert parse_symbols(None, max_symbols=40) == []


def test_quotes_requires_symbols(client: TestClient) -> None:
    r = client.get("/api/quotes")
    assert r.status_code == 400
    assert r.json() == {"error": "symbols required"}


def test_quotes_blank_symbols_rejected(client: TestClient) -> None:
    r = client.get("/api/quotes", params={"symbols": " , "})
    assert r.status_code == 400
    assert r.json() == {"error": "symbols required"}


def test_quotes_returns_prices_in_order(client: TestClient, fake_finnhub: dict) -> None:
    fake_finnhub["prices"].update({"AAPL": 190.5, "BINANCE:BTCUSDT": 65000})
    r = client.get("/api/quotes", params={"symbols": "AAPL, BINANCE:BTCUSDT"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert [item["symbol"] for item in data] == ["AAPL", "BINANCE:BTCUSDT"]
    assert data[0]["price"] == 190.5
    assert data[0]["change"] == 1.5
    assert data[0]["percentChange"] == 0.8
    assert data[0]["previousClose"] == 100.0
    assert data[0]["high"] is None
    assert data[1]["price"] == 65000


def test_quotes_marks_failed_symbols_without_failing_batch(client: TestClient, fake_finnhub: dict) -> None:
    fake_finnhub["prices"].update({"AAPL": 190.5})
    fake_finnhub["failing"].add("TSLA")
    r = client.get("/api/quotes", params={"symbols": "AAPL,TSLA,NOPRICE"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data[0]["price"] == 190.5
    assert data[1] == {"symbol": "TSLA", "error": True}
    assert data[2] == {"symbol": "NOPRICE", "error": True}


def test_quotes_unexpected_failure_is_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    from core import finnhub

    def broken_client(**_: Any) -> httpx.AsyncClient:
        raise RuntimeError("boom")

    monkeypatch.setattr(finnhub, "build_client", broken_client)
    r = client.get("/api/quotes", params={"symbols": "AAPL"})
    assert r.status_code == 500
    assert r.json() == {"error": "quote_failed"}


@pytest.mark.asyncio
async def test_fetch_quote_rejects_non_numeric_price() -> None:
    from core import finnhub

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"c": "n/a"}))
    async with finnhub.build_client(base_url="https://finnhub.test", transport=transport) as client:
        with pytest.raises(finnhub.FinnhubError):
            await finnhub.fetch_quote(client, symbol="AAPL", token="t")


@pytest.mark.asyncio
async def test_fetch_quote_rejects_non_json_body() -> None:
    from core import finnhub

    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    async with finnhub.build_client(base_url="https://finnhub.test", transport=transport) as client:
        with pytest.raises(finnhub.FinnhubError):
            await finnhub.fetch_quote(client, symbol="AAPL", token="t")


def test_quotes_unreachable_upstream_fails_batch(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    from core import finnhub

    real_build_client = finnhub.build_client

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def build_client(**kwargs: Any) -> httpx.AsyncClient:
        kwargs["transport"] = httpx.MockTransport(unreachable)
        return real_build_client(**kwargs)

    monkeypatch.setattr(finnhub, "build_client", build_client)
    r = client.get("/api/quotes", params={"symbols": "AAPL"})
    assert r.status_code == 500
    assert r.json() == {"error": "quote_failed"}
