"""
Savings persistence (raw SQL).

Each counter update is its own read-modify-write transaction: lock the row,
read the current value (missing counts as zero), write the new value.
"""

from __future__ import annotations

from decimal import Decimal

from core import db

COMMUNITY_ID = "global"


async def insert_save_event(
    *,
    user_id: str,
    amount: Decimal,
    category: str | None = None,
    note: str | None = None,
    competition_id: str | None = None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO save_events (user_id, amount, category, note, competition_id)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING id, user_id, amount, category, note, competition_id, created_at
        """,
        user_id,
        amount,
        category,
        note,
        competition_id,
    )
    if row is None:
        raise RuntimeError("Failed to insert save event.")
    return row


async def add_to_user_totals(*, user_id: str, amount: Decimal, display_name: str | None = None) -> dict:
    async with db.transaction() as conn:
        await conn.execute(
            """
            INSERT INTO users (user_id, display_name)
            VALUES ($1, $2)
            ON CONFLICT (user_id) DO NOTHING
            """,
            user_id,
            display_name,
        )
        current = await db.tx_fetch_one(
            conn,
            """
            SELECT total_saved, save_count
            FROM users
            WHERE user_id = $1
            FOR UPDATE
            """,
            user_id,
        )
        total = (current or {}).get("total_saved") or Decimal(0)
        count = (current or {}).get("save_count") or 0
        row = await db.tx_fetch_one(
            conn,
            """
            UPDATE users
            SET total_saved = $2,
                save_count = $3,
                display_name = COALESCE($4, display_name),
                updated_at = now()
            WHERE user_id = $1
            RETURNING user_id, display_name, total_saved, save_count
            """,
            user_id,
            total + amount,
            count + 1,
            display_name,
        )
    if row is None:
        raise RuntimeError("Failed to update user totals.")
    return row


async def add_to_member_score(*, competition_id: str, user_id: str, amount: Decimal) -> dict | None:
    """
    Returns None when the user has not joined the competition.
    """
    async with db.transaction() as conn:
        current = await db.tx_fetch_one(
            conn,
            """
            SELECT score
            FROM competition_members
            WHERE competition_id = $1
              AND user_id = $2
            FOR UPDATE
            """,
            competition_id,
            user_id,
        )
        if current is None:
            return None
        score = current.get("score") or Decimal(0)
        return await db.tx_fetch_one(
            conn,
            """
            UPDATE competition_members
            SET score = $3,
                updated_at = now()
            WHERE competition_id = $1
              AND user_id = $2
            RETURNING competition_id, user_id, display_name, score, joined_at
            """,
            competition_id,
            user_id,
            score + amount,
        )


async def add_to_community_total(*, amount: Decimal) -> dict:
    async with db.transaction() as conn:
        await conn.execute(
            """
            INSERT INTO community_totals (id)
            VALUES ($1)
            ON CONFLICT (id) DO NOTHING
            """,
            COMMUNITY_ID,
        )
        current = await db.tx_fetch_one(
            conn,
            "SELECT total, save_count FROM community_totals WHERE id = $1 FOR UPDATE",
            COMMUNITY_ID,
        )
        total = (current or {}).get("total") or Decimal(0)
        count = (current or {}).get("save_count") or 0
        row = await db.tx_fetch_one(
            conn,
            """
            UPDATE community_totals
            SET total = $2,
                save_count = $3,
                updated_at = now()
            WHERE id = $1
            RETURNING id, total, save_count
            """,
            COMMUNITY_ID,
            total + amount,
            count + 1,
        )
    if row is None:
        raise RuntimeError("Failed to update community total.")
    return row


async def upsert_member(*, competition_id: str, user_id: str, display_name: str | None = None) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO competition_members (competition_id, user_id, display_name)
        VALUES ($1, $2, $3)
        ON CONFLICT (competition_id, user_id) DO UPDATE
        SET display_name = COALESCE(EXCLUDED.display_name, competition_members.display_name),
            updated_at = now()
        RETURNING competition_id, user_id, display_name, score, joined_at
        """,
        competition_id,
        user_id,
        display_name,
    )
    if row is None:
        raise RuntimeError("Failed to upsert competition member.")
    return row


async def list_leaders(*, competition_id: str, limit: int = 10) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT user_id, display_name, score, joined_at
        FROM competition_members
        WHERE competition_id = $1
        ORDER BY score DESC, joined_at ASC, user_id ASC
        LIMIT $2
        """,
        competition_id,
        limit,
    )


async def get_community_total() -> dict | None:
    return await db.fetch_one(
        "SELECT id, total, save_count FROM community_totals WHERE id = $1",
        COMMUNITY_ID,
    )


async def count_savers() -> int:
    row = await db.fetch_one("SELECT count(*)::int AS n FROM users WHERE save_count > 0")
    return int(row["n"]) if row is not None else 0
