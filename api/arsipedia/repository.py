"""
Arsipedia persistence (raw SQL).

Schema:
- arsipedia(id text, admin_id, title, tags text, image_path, created_at, updated_at)

`tags` holds a JSON-encoded array of strings.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from core import db

_COLUMNS = "id, admin_id, title, tags, image_path, created_at, updated_at"

UPDATABLE_COLUMNS = ("title", "tags", "image_path")


async def find_admin(admin_id: str | None) -> dict | None:
    if not admin_id:
        return None
    return await db.fetch_one(
        """
        SELECT id, name, email
        FROM admins
        WHERE id = $1
        """,
        admin_id,
        context="Failed to load admin",
    )


async def create_entry(data: dict[str, Any]) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO arsipedia (id, admin_id, title, tags, image_path)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {_COLUMNS}
        """,
        str(uuid4()),
        data["admin_id"],
        data.get("title"),
        data.get("tags") or "[]",
        data.get("image_path"),
        context="Failed to create arsipedia entry",
    )
    if row is None:
        raise RuntimeError("Failed to create arsipedia entry.")
    return row


async def list_entries() -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM arsipedia
        ORDER BY created_at DESC, id DESC
        """,
        context="Failed to list arsipedia entries",
    )


async def get_entry(entry_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM arsipedia
        WHERE id = $1
        """,
        entry_id,
        context="Failed to load arsipedia entry",
    )


async def update_entry(entry_id: str, data: dict[str, Any]) -> dict | None:
    assignments: list[str] = []
    args: list[Any] = [entry_id]
    for column in UPDATABLE_COLUMNS:
        if column in data:
            args.append(data[column])
            assignments.append(f"{column} = ${len(args)}")
    assignments.append("updated_at = now()")

    return await db.fetch_one(
        f"""
        UPDATE arsipedia
        SET {", ".join(assignments)}
        WHERE id = $1
        RETURNING {_COLUMNS}
        """,
        *args,
        context="Failed to update arsipedia entry",
    )


async def delete_entry(entry_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        DELETE FROM arsipedia
        WHERE id = $1
        RETURNING {_COLUMNS}
        """,
        entry_id,
        context="Failed to delete arsipedia entry",
    )
