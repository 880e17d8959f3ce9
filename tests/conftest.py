"""
Shared test configuration.

The API modules import each other as top-level packages (`from core import db`),
so the `api/` directory goes on sys.path.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

API_DIR = Path(__file__).resolve().parent.parent / "api"
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Deterministic upstream settings; no database."""

    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("FINNHUB_KEY", "test-key")
    monkeypatch.setenv("FINNHUB_BASE_URL", "https://finnhub.test/api/v1")
    monkeypatch.setenv("LLM_BASE_URL", "https://llm.test/v1")
    monkeypatch.setenv("LLM_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_MODEL", "test-model")
    monkeypatch.setenv("LOG_LEVEL", "INFO")


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    import main

    main.rate_limiter.reset()


@pytest.fixture
def client() -> TestClient:
    # No context manager: the lifespan (DB pool) is not started.
    import main

    return TestClient(main.app)
