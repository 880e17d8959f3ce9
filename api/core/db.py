"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

# One row per "document". Numeric fields default to zero so a missing value
# reads the same as an untouched one.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    user_id      text PRIMARY KEY,
    display_name text,
    total_saved  numeric NOT NULL DEFAULT 0,
    save_count   integer NOT NULL DEFAULT 0,
    created_at   timestamptz NOT NULL DEFAULT now(),
    updated_at   timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS save_events (
    id             bigserial PRIMARY KEY,
    user_id        text NOT NULL,
    amount         numeric NOT NULL,
    category       text,
    note           text,
    competition_id text,
    created_at     timestamptz NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS save_events_user_id_idx ON save_events (user_id, created_at DESC);

CREATE TABLE IF NOT EXISTS competition_members (
    competition_id text NOT NULL,
    user_id        text NOT NULL,
    display_name   text,
    score          numeric NOT NULL DEFAULT 0,
    joined_at      timestamptz NOT NULL DEFAULT now(),
    updated_at     timestamptz NOT NULL DEFAULT now(),
    PRIMARY KEY (competition_id, user_id)
);

CREATE INDEX IF NOT EXISTS competition_members_score_idx
    ON competition_members (competition_id, score DESC, joined_at ASC);

CREATE TABLE IF NOT EXISTS community_totals (
    id         text PRIMARY KEY,
    total      numeric NOT NULL DEFAULT 0,
    save_count integer NOT NULL DEFAULT 0,
    updated_at timestamptz NOT NULL DEFAULT now()
);
"""


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def is_configured() -> bool:
    return bool(os.environ.get("DATABASE_URL", "").strip())


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=1,
        max_size=5,
        command_timeout=30,
    )
    logger.info("db_pool_ready")


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


async def apply_schema() -> None:
    """
    Create tables and indexes if they do not exist yet.
    """
    await pool().execute(SCHEMA_SQL)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire a connection and run the block inside one transaction.

    Commits when the block exits normally, rolls back on any exception.
    """
    async with pool().acquire() as conn:
        async with conn.transaction():
            yield conn


async def tx_fetch_one(conn: asyncpg.Connection, sql: str, *args: Any) -> dict[str, Any] | None:
    row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None
