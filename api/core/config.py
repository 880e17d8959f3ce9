"""
Environment-backed settings.

Every accessor reads the environment on call so tests can monkeypatch values
without reloading modules.
"""

from __future__ import annotations

import os


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def service_name() -> str:
    return "Money Mind"


def port() -> int:
    return _env_int("PORT", 10000)


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def public_dir() -> str:
    return _env_str("PUBLIC_DIR", "public")


def cors_origins() -> list[str]:
    raw = _env_str("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


# quotes

def finnhub_key() -> str:
    return os.environ.get("FINNHUB_KEY", "").strip()


def finnhub_base_url() -> str:
    return _env_str("FINNHUB_BASE_URL", "https://finnhub.io/api/v1")


def quotes_max_symbols() -> int:
    return max(1, _env_int("QUOTES_MAX_SYMBOLS", 40))


def quotes_timeout_s() -> float:
    return _env_float("QUOTES_TIMEOUT_S", 10.0)


# coach

def llm_base_url() -> str:
    return _env_str("LLM_BASE_URL", "https://api.openai.com/v1")


def llm_api_key() -> str:
    return os.environ.get("LLM_API_KEY", "").strip()


def llm_model() -> str:
    return _env_str("LLM_MODEL", "gpt-4o-mini")


def llm_temperature() -> float:
    return _env_float("LLM_TEMPERATURE", 0.7)


def llm_max_output_tokens() -> int:
    return _env_int("LLM_MAX_OUTPUT_TOKENS", 400)


def llm_timeout_s() -> float:
    return _env_float("LLM_TIMEOUT_S", 60.0)


def coach_history_messages() -> int:
    return max(0, min(_env_int("COACH_HISTORY_MESSAGES", 8), 50))


# rate limiting

def rate_limit_max() -> int:
    return _env_int("RATE_LIMIT_MAX", 100)


def rate_limit_window_s() -> int:
    return max(1, _env_int("RATE_LIMIT_WINDOW_S", 15 * 60))
