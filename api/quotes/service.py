"""
Live quote lookup.

Flow:
1) Parse the comma-separated symbol list (trim, drop blanks, cap length)
2) Fetch every symbol from Finnhub concurrently over one client
3) Replace symbols Finnhub rejects with an error marker so the batch still succeeds;
   a transport failure (upstream unreachable) fails the whole batch
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from fastapi import HTTPException

from core import config, finnhub

logger = logging.getLogger(__name__)


def parse_symbols(raw: str | None, *, max_symbols: int) -> list[str]:
    symbols = [s.strip() for s in (raw or "").split(",")]
    return [s for s in symbols if s][:max_symbols]


async def _quote_or_marker(client: httpx.AsyncClient, symbol: str, *, token: str) -> dict[str, Any]:
    try:
        return await finnhub.fetch_quote(client, symbol=symbol, token=token)
    except finnhub.FinnhubError as exc:
        logger.warning("quote_unavailable symbol=%s reason=%s", symbol, exc)
        return {"symbol": symbol, "error": True}


async def get_quotes(
    raw_symbols: str | None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    symbols = parse_symbols(raw_symbols, max_symbols=config.quotes_max_symbols())
    if not symbols:
        raise HTTPException(status_code=400, detail="symbols required")

    try:
        token = config.finnhub_key()
        async with finnhub.build_client(
            base_url=config.finnhub_base_url(),
            timeout_s=config.quotes_timeout_s(),
            transport=transport,
        ) as client:
            results = await asyncio.gather(
                *(_quote_or_marker(client, symbol, token=token) for symbol in symbols)
            )
    except Exception as exc:
        logger.exception("quote_fetch_failed symbols=%s", ",".join(symbols))
        raise HTTPException(status_code=500, detail="quote_failed") from exc

    return {"data": list(results)}
