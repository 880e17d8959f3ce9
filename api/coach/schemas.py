"""
Pydantic schemas for the coach endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CoachRequest(BaseModel):
    message: str = Field(default="", max_length=4000)
    # Validated in the service; a non-list or malformed entries are dropped, not rejected.
    history: Any = None


class CoachResponse(BaseModel):
    reply: str
    model: str
