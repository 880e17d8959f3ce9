"""
Savings, competition and community API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from . import schemas, service

router = APIRouter(prefix="/api")


@router.post("/save")
async def save(request: schemas.SaveRequest) -> dict:
    return await service.save(request)


@router.post("/competition/join")
async def join_competition(request: schemas.JoinCompetitionRequest) -> dict:
    return await service.join_competition(request)


@router.get("/competition/leaderboard")
async def leaderboard(
    competition_id: str = Query(default="global", alias="competitionId", max_length=128),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    return await service.leaderboard(competition_id=competition_id, limit=limit)


@router.get("/community")
async def community() -> dict:
    return await service.community()
