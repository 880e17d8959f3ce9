"""
Finnhub HTTP client helpers.

Used endpoint:
- GET /quote?symbol=...&token=... -> {"c": price, "d": change, "dp": percent, "h", "l", "o", "pc", "t"}

Crypto symbols use the exchange prefix form Finnhub expects (e.g. BINANCE:BTCUSDT).
"""

from __future__ import annotations

from typing import Any

import httpx


# Finnhub failures are explicit and separable from other runtime errors.
class FinnhubError(RuntimeError):
    pass


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise FinnhubError("FINNHUB_BASE_URL is empty.")
    return base_url.rstrip("/")


def build_client(
    *,
    base_url: str,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Client shared by every symbol of one batch.
    """
    return httpx.AsyncClient(
        base_url=_normalize_base_url(base_url),
        timeout=timeout_s,
        transport=transport,
    )


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


async def fetch_quote(client: httpx.AsyncClient, *, symbol: str, token: str) -> dict[str, Any]:
    """
    Fetch one quote and return it in the API's camelCase shape.
    """
    symbol = (symbol or "").strip()
    if not symbol:
        raise FinnhubError("Symbol is empty.")

    resp = await client.get("/quote", params={"symbol": symbol, "token": token})
    if not resp.is_success:
        body = resp.text[:200]
        raise FinnhubError(f"Finnhub quote request failed: {resp.status_code} {body}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise FinnhubError("Finnhub returned a non-JSON body.") from exc
    if not isinstance(data, dict):
        raise FinnhubError("Finnhub returned an unexpected payload.")

    price = _as_number(data.get("c"))
    if price is None:
        raise FinnhubError(f"Finnhub returned no price for {symbol}.")

    return {
        "symbol": symbol,
        "price": price,
        "change": _as_number(data.get("d")),
        "percentChange": _as_number(data.get("dp")),
        "high": _as_number(data.get("h")),
        "low": _as_number(data.get("l")),
        "open": _as_number(data.get("o")),
        "previousClose": _as_number(data.get("pc")),
    }
