"""
Coach API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import schemas, service

router = APIRouter(prefix="/api")


@router.post("/coach", response_model=schemas.CoachResponse)
async def coach(request: schemas.CoachRequest) -> dict:
    return await service.coach(request.message, history=request.history)
