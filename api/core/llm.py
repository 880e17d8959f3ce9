"""
Chat-completion HTTP client helpers (OpenAI-compatible API).

Used endpoint:
- POST /chat/completions -> {"model": "...", "choices": [{"message": {"role": "assistant", "content": "..."}}]}
"""

from __future__ import annotations

from typing import Any

import httpx


class LLMError(RuntimeError):
    pass


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise LLMError("LLM_BASE_URL is empty.")
    return base_url.rstrip("/")


def _extract_content(data: dict[str, Any]) -> str:
    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0]
        if isinstance(first, dict):
            message = first.get("message")
            if isinstance(message, dict):
                content = message.get("content")
                if isinstance(content, str) and content.strip():
                    return content.strip()
            # Legacy completions shape.
            text = first.get("text")
            if isinstance(text, str) and text.strip():
                return text.strip()
    raise LLMError("LLM returned an empty chat response.")


async def chat_messages(
    *,
    base_url: str,
    api_key: str,
    model: str,
    messages: list[dict[str, str]],
    timeout_s: float = 60.0,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """
    Generate one assistant message from a message list.
    """
    base_url = _normalize_base_url(base_url)
    model = (model or "").strip()
    if not model:
        raise LLMError("LLM model name is empty.")
    if not messages:
        raise LLMError("Messages list is empty.")

    payload: dict[str, Any] = {"model": model, "messages": messages}
    if temperature is not None:
        payload["temperature"] = float(temperature)
    if max_output_tokens is not None:
        payload["max_tokens"] = int(max_output_tokens)

    headers: dict[str, str] = {}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    async with httpx.AsyncClient(base_url=base_url, timeout=timeout_s, transport=transport) as client:
        resp = await client.post("/chat/completions", json=payload, headers=headers)

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        raise LLMError(f"LLM chat request failed: {resp.status_code} {body}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise LLMError("LLM returned a non-JSON body.") from exc
    if not isinstance(data, dict):
        raise LLMError("LLM returned an unexpected payload.")
    return _extract_content(data)
