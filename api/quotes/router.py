"""
Quote API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from . import service

router = APIRouter(prefix="/api")


@router.get("/quotes")
async def get_quotes(symbols: str | None = Query(default=None, max_length=4000)) -> dict:
    return await service.get_quotes(symbols)
