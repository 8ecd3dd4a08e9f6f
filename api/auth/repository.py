"""
Auth persistence helpers.

Architects and admins live in separate tables with the same login columns.
"""

from __future__ import annotations

from uuid import uuid4

from core import db

# role -> table; never interpolate anything else into SQL.
_ACCOUNT_TABLES = {
    "architect": "architects",
    "admin": "admins",
}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _table(role: str) -> str:
    try:
        return _ACCOUNT_TABLES[role]
    except KeyError:
        raise ValueError(f"Unknown account role: {role}") from None


async def get_account_by_email(role: str, email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT id, name, email, password_hash, created_at
        FROM {_table(role)}
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_account_by_id(role: str, account_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT id, name, email, created_at
        FROM {_table(role)}
        WHERE id = $1
        """,
        account_id,
    )


async def create_architect(*, name: str, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO architects (id, name, email, password_hash)
        VALUES ($1, $2, $3, $4)
        RETURNING id, name, email, created_at
        """,
        str(uuid4()),
        name.strip(),
        normalize_email(email),
        password_hash,
        context="Failed to create architect",
        conflict="Email is already registered.",
    )
    if row is None:
        raise RuntimeError("Failed to create architect.")
    return row
