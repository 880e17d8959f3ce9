"""
Coach orchestration: prompt + recent history + question -> one LLM reply.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from core import config, llm

from . import prompts

logger = logging.getLogger(__name__)


def build_history_messages(history: Any, *, limit: int) -> list[dict[str, str]]:
    if not isinstance(history, list):
        return []

    messages: list[dict[str, str]] = []
    for item in history:
        if not isinstance(item, dict):
            continue
        role = str(item.get("role") or "").strip()
        if role not in {"user", "assistant"}:
            continue
        content = item.get("content")
        if not isinstance(content, str) or not content.strip():
            continue
        messages.append({"role": role, "content": content.strip()})

    if limit <= 0:
        return []
    return messages[-limit:]


async def coach(message: str, *, history: Any = None) -> dict[str, Any]:
    message = (message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="message required")

    llm_messages: list[dict[str, str]] = [{"role": "system", "content": prompts.system_prompt()}]
    llm_messages.extend(build_history_messages(history, limit=config.coach_history_messages()))
    llm_messages.append({"role": "user", "content": message})

    model = config.llm_model()
    try:
        reply = await llm.chat_messages(
            base_url=config.llm_base_url(),
            api_key=config.llm_api_key(),
            model=model,
            messages=llm_messages,
            timeout_s=config.llm_timeout_s(),
            temperature=config.llm_temperature(),
            max_output_tokens=config.llm_max_output_tokens(),
        )
    except Exception as exc:
        logger.exception("coach_failed model=%s", model)
        raise HTTPException(status_code=500, detail="coach_failed") from exc

    return {"reply": reply, "model": model}
