"""
Savings, competition and community logic.

A save runs three independent transactions in order: user totals, competition
member score (only when a competition is named and the user has joined it),
community total. A failure stops the sequence; earlier transactions stay
committed.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from fastapi import HTTPException

from . import repository, schemas

logger = logging.getLogger(__name__)


def _number(value: Any) -> float | int:
    """
    JSON-friendly number; missing values read as zero.
    """
    if value is None:
        return 0
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def _member_view(row: dict) -> dict[str, Any]:
    return {
        "competitionId": str(row["competition_id"]),
        "userId": str(row["user_id"]),
        "displayName": row.get("display_name"),
        "score": _number(row.get("score")),
    }


async def save(request: schemas.SaveRequest) -> dict[str, Any]:
    user_id = request.user_id.strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="userId required")
    display_name = _clean(request.display_name)
    competition_id = _clean(request.competition_id)
    amount = request.amount

    try:
        await repository.insert_save_event(
            user_id=user_id,
            amount=amount,
            category=_clean(request.category),
            note=_clean(request.note),
            competition_id=competition_id,
        )
        user = await repository.add_to_user_totals(
            user_id=user_id,
            amount=amount,
            display_name=display_name,
        )
        member = None
        if competition_id is not None:
            member = await repository.add_to_member_score(
                competition_id=competition_id,
                user_id=user_id,
                amount=amount,
            )
        community = await repository.add_to_community_total(amount=amount)
    except Exception as exc:
        logger.exception("save_failed user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="save_failed") from exc

    logger.info("save_recorded user_id=%s amount=%s competition_id=%s", user_id, amount, competition_id)
    return {
        "ok": True,
        "userTotal": _number(user.get("total_saved")),
        "saveCount": _number(user.get("save_count")),
        "competitionScore": _number(member.get("score")) if member is not None else None,
        "communityTotal": _number(community.get("total")),
    }


async def join_competition(request: schemas.JoinCompetitionRequest) -> dict[str, Any]:
    user_id = request.user_id.strip()
    competition_id = request.competition_id.strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="userId required")
    if not competition_id:
        raise HTTPException(status_code=400, detail="competitionId required")

    try:
        row = await repository.upsert_member(
            competition_id=competition_id,
            user_id=user_id,
            display_name=_clean(request.display_name),
        )
    except Exception as exc:
        logger.exception("join_failed user_id=%s competition_id=%s", user_id, competition_id)
        raise HTTPException(status_code=500, detail="join_failed") from exc

    return {"ok": True, "member": _member_view(row)}


async def leaderboard(*, competition_id: str = "global", limit: int = 10) -> dict[str, Any]:
    competition_id = (competition_id or "").strip() or "global"
    try:
        rows = await repository.list_leaders(
            competition_id=competition_id,
            limit=max(1, min(limit, 100)),
        )
    except Exception as exc:
        logger.exception("leaderboard_failed competition_id=%s", competition_id)
        raise HTTPException(status_code=500, detail="leaderboard_failed") from exc

    return {
        "competitionId": competition_id,
        "leaders": [
            {
                "rank": rank,
                "userId": str(row["user_id"]),
                "displayName": row.get("display_name"),
                "score": _number(row.get("score")),
            }
            for rank, row in enumerate(rows, start=1)
        ],
    }


async def community() -> dict[str, Any]:
    try:
        row = await repository.get_community_total()
        members = await repository.count_savers()
    except Exception as exc:
        logger.exception("community_failed")
        raise HTTPException(status_code=500, detail="community_failed") from exc

    row = row or {}
    return {
        "total": _number(row.get("total")),
        "saveCount": _number(row.get("save_count")),
        "members": members,
    }
