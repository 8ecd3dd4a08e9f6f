"""
Portfolio link persistence (raw SQL).

Schema:
- portfolio_links(id text, architect_id, url, "order" int, created_at)
- unique (architect_id, url)

`order` is a reserved word and must stay quoted in SQL.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import asyncpg

from core import db
from core.errors import DatabaseError

_COLUMNS = 'id, architect_id, url, "order", created_at'

DUPLICATE_URL_MESSAGE = "This portfolio link already exists"


async def get_link(link_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM portfolio_links
        WHERE id = $1
        """,
        link_id,
        context="Failed to load portfolio link",
    )


async def list_for_architect(architect_id: str) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM portfolio_links
        WHERE architect_id = $1
        ORDER BY "order" ASC, created_at ASC
        """,
        architect_id,
        context="Failed to list portfolio links",
    )


async def url_exists(architect_id: str, url: str, *, exclude_id: str | None = None) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM portfolio_links
        WHERE architect_id = $1
          AND url = $2
          AND ($3::text IS NULL OR id <> $3)
        LIMIT 1
        """,
        architect_id,
        url,
        exclude_id,
        context="Failed to check portfolio link url",
    )
    return row is not None


async def next_order(architect_id: str) -> int:
    value = await db.fetch_value(
        """
        SELECT COALESCE(MAX("order") + 1, 0)
        FROM portfolio_links
        WHERE architect_id = $1
        """,
        architect_id,
        context="Failed to compute next portfolio link order",
    )
    return int(value or 0)


async def create_link(architect_id: str, *, url: str, order: int) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO portfolio_links (id, architect_id, url, "order")
        VALUES ($1, $2, $3, $4)
        RETURNING {_COLUMNS}
        """,
        str(uuid4()),
        architect_id,
        url,
        order,
        context="Failed to create portfolio link",
        conflict=DUPLICATE_URL_MESSAGE,
    )
    if row is None:
        raise RuntimeError("Failed to create portfolio link.")
    return row


async def update_link(link_id: str, fields: dict[str, Any]) -> dict | None:
    assignments: list[str] = []
    args: list[Any] = [link_id]
    if "url" in fields:
        args.append(fields["url"])
        assignments.append(f"url = ${len(args)}")
    if "order" in fields:
        args.append(int(fields["order"]))
        assignments.append(f'"order" = ${len(args)}')
    if not assignments:
        return await get_link(link_id)

    return await db.fetch_one(
        f"""
        UPDATE portfolio_links
        SET {", ".join(assignments)}
        WHERE id = $1
        RETURNING {_COLUMNS}
        """,
        *args,
        context="Failed to update portfolio link",
        conflict=DUPLICATE_URL_MESSAGE,
    )


async def reorder(architect_id: str, ordered_ids: list[str]) -> list[dict] | None:
    """
    Set `order` = position in `ordered_ids` for one architect, atomically.

    The ownership check and the batched update share one transaction and the
    rows are locked first, so concurrent reorders serialize. Returns None (and
    writes nothing) if any id is missing or owned by someone else.
    """
    try:
        async with db.transaction() as conn:
            owned = await conn.fetch(
                """
                SELECT id
                FROM portfolio_links
                WHERE architect_id = $1
                  AND id = ANY($2::text[])
                FOR UPDATE
                """,
                architect_id,
                ordered_ids,
            )
            if len(owned) != len(set(ordered_ids)):
                return None

            await conn.executemany(
                'UPDATE portfolio_links SET "order" = $2 WHERE id = $1',
                [(link_id, index) for index, link_id in enumerate(ordered_ids)],
            )

            rows = await conn.fetch(
                f"""
                SELECT {_COLUMNS}
                FROM portfolio_links
                WHERE id = ANY($1::text[])
                """,
                ordered_ids,
            )
    except asyncpg.PostgresError as exc:
        raise DatabaseError(f"Failed to reorder portfolio links: {exc}") from exc

    by_id = {r["id"]: dict(r) for r in rows}
    return [by_id[link_id] for link_id in ordered_ids]


async def delete_link(link_id: str) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM portfolio_links
        WHERE id = $1
        RETURNING id
        """,
        link_id,
        context="Failed to delete portfolio link",
    )
    return row is not None
