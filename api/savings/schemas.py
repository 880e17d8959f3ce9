"""
Pydantic schemas for savings and competition endpoints.

Field names on the wire are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class SaveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1, max_length=128)
    amount: Decimal = Field(..., gt=0, le=Decimal("1000000000"))
    display_name: str | None = Field(default=None, alias="displayName", max_length=80)
    category: str | None = Field(default=None, max_length=80)
    note: str | None = Field(default=None, max_length=500)
    competition_id: str | None = Field(default=None, alias="competitionId", min_length=1, max_length=128)


class JoinCompetitionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1, max_length=128)
    display_name: str | None = Field(default=None, alias="displayName", max_length=80)
    competition_id: str = Field(default="global", alias="competitionId", min_length=1, max_length=128)
