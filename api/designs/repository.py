"""
Design persistence (raw SQL).

Schema:
- designs(id text, title, description, kategori, luas_bangunan, luas_tanah,
          foto_bangunan text, foto_denah text, architect_id, created_at, updated_at)

`foto_bangunan` / `foto_denah` hold JSON-encoded arrays of relative file paths.
Listing queries LEFT JOIN `architects` and return the summary as a nested
`architect` dict.
"""

from __future__ import annotations

import math
from typing import Any
from uuid import uuid4

from core import db

ORDERABLE_COLUMNS = {"created_at", "updated_at", "title"}
DIRECTIONS = {"asc", "desc"}

UPDATABLE_COLUMNS = (
    "title",
    "description",
    "kategori",
    "luas_bangunan",
    "luas_tanah",
    "foto_bangunan",
    "foto_denah",
)

_DESIGN_COLUMNS = """
    d.id, d.title, d.description, d.kategori, d.luas_bangunan, d.luas_tanah,
    d.foto_bangunan, d.foto_denah, d.architect_id, d.created_at, d.updated_at
"""

_ARCHITECT_COLUMNS = """
    a.id AS architect__id,
    a.name AS architect__name,
    a.profile_picture_url AS architect__profile_picture_url,
    a.tahun_pengalaman AS architect__tahun_pengalaman,
    a.area_pengalaman AS architect__area_pengalaman
"""

_FROM_WITH_ARCHITECT = """
    FROM designs d
    LEFT JOIN architects a ON a.id = d.architect_id
"""

_RETURNING = """
    RETURNING id, title, description, kategori, luas_bangunan, luas_tanah,
              foto_bangunan, foto_denah, architect_id, created_at, updated_at
"""


def _nest_architect(row: dict[str, Any]) -> dict[str, Any]:
    """
    Fold `architect__*` columns into row["architect"] (omitted when the join found nothing).
    """
    design: dict[str, Any] = {}
    architect: dict[str, Any] = {}
    for key, value in row.items():
        if key.startswith("architect__"):
            architect[key.removeprefix("architect__")] = value
        else:
            design[key] = value
    if architect.get("id") is not None:
        design["architect"] = architect
    return design


async def create_design(architect_id: str, data: dict[str, Any]) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO designs (
            id, architect_id, title, description, kategori,
            luas_bangunan, luas_tanah, foto_bangunan, foto_denah
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        {_RETURNING}
        """,
        str(uuid4()),
        architect_id,
        data["title"],
        data.get("description"),
        data.get("kategori"),
        data.get("luas_bangunan"),
        data.get("luas_tanah"),
        data.get("foto_bangunan") or "[]",
        data.get("foto_denah") or "[]",
        context="Failed to create design",
    )
    if row is None:
        raise RuntimeError("Failed to create design.")
    return row


async def get_design(design_id: str, *, include_architect: bool = False) -> dict | None:
    if not include_architect:
        return await db.fetch_one(
            f"""
            SELECT {_DESIGN_COLUMNS}
            FROM designs d
            WHERE d.id = $1
            """,
            design_id,
            context="Failed to load design",
        )

    row = await db.fetch_one(
        f"""
        SELECT {_DESIGN_COLUMNS}, {_ARCHITECT_COLUMNS}
        {_FROM_WITH_ARCHITECT}
        WHERE d.id = $1
        """,
        design_id,
        context="Failed to load design",
    )
    return _nest_architect(row) if row is not None else None


async def _paginate(
    where: str,
    args: list[Any],
    *,
    page: int,
    limit: int,
    order_by: str = "created_at",
    direction: str = "desc",
) -> dict[str, Any]:
    if order_by not in ORDERABLE_COLUMNS or direction not in DIRECTIONS:
        raise ValueError(f"Unsupported ordering: {order_by} {direction}")

    total = await db.fetch_value(
        f"SELECT count(*) {_FROM_WITH_ARCHITECT} WHERE {where}",
        *args,
        context="Failed to count designs",
    )

    n = len(args)
    rows = await db.fetch_all(
        f"""
        SELECT {_DESIGN_COLUMNS}, {_ARCHITECT_COLUMNS}
        {_FROM_WITH_ARCHITECT}
        WHERE {where}
        ORDER BY d.{order_by} {direction.upper()}, d.id {direction.upper()}
        LIMIT ${n + 1}
        OFFSET ${n + 2}
        """,
        *args,
        limit,
        (page - 1) * limit,
        context="Failed to list designs",
    )

    total = int(total or 0)
    return {
        "data": [_nest_architect(r) for r in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    }


async def list_by_architect(architect_id: str, **options: Any) -> dict[str, Any]:
    return await _paginate("d.architect_id = $1", [architect_id], **options)


async def list_all(**options: Any) -> dict[str, Any]:
    return await _paginate("TRUE", [], **options)


async def list_by_kategori(kategori: str, **options: Any) -> dict[str, Any]:
    return await _paginate(
        "strpos(lower(coalesce(d.kategori, '')), lower($1)) > 0",
        [kategori],
        **options,
    )


async def search_designs(
    *,
    q: str = "",
    kategori: str = "",
    city: str = "",
    **options: Any,
) -> dict[str, Any]:
    """
    Conjunctive search; blank terms are not applied.

    - q: case-insensitive substring of title or description
    - kategori: case-insensitive exact match
    - city: case-insensitive substring of the architect's city
    """
    conditions: list[str] = []
    args: list[Any] = []

    if q:
        args.append(q)
        conditions.append(
            f"(strpos(lower(d.title), lower(${len(args)})) > 0"
            f" OR strpos(lower(coalesce(d.description, '')), lower(${len(args)})) > 0)"
        )
    if kategori:
        args.append(kategori)
        conditions.append(f"lower(d.kategori) = lower(${len(args)})")
    if city:
        args.append(city)
        conditions.append(f"strpos(lower(coalesce(a.city, '')), lower(${len(args)})) > 0")

    where = " AND ".join(conditions) or "TRUE"
    return await _paginate(where, args, **options)


async def latest_designs(limit: int = 10) -> list[dict]:
    rows = await db.fetch_all(
        f"""
        SELECT {_DESIGN_COLUMNS}, {_ARCHITECT_COLUMNS}
        {_FROM_WITH_ARCHITECT}
        ORDER BY d.created_at DESC, d.id DESC
        LIMIT $1
        """,
        limit,
        context="Failed to find latest designs",
    )
    return [_nest_architect(r) for r in rows]


async def update_design(design_id: str, fields: dict[str, Any]) -> dict | None:
    assignments: list[str] = []
    args: list[Any] = [design_id]
    for column in UPDATABLE_COLUMNS:
        if column in fields:
            args.append(fields[column])
            assignments.append(f"{column} = ${len(args)}")
    assignments.append("updated_at = now()")

    return await db.fetch_one(
        f"""
        UPDATE designs
        SET {", ".join(assignments)}
        WHERE id = $1
        {_RETURNING}
        """,
        *args,
        context="Failed to update design",
    )


async def delete_design(design_id: str) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM designs
        WHERE id = $1
        RETURNING id
        """,
        design_id,
        context="Failed to delete design",
    )
    return row is not None


async def statistics(architect_id: str) -> dict[str, Any]:
    rows = await db.fetch_all(
        """
        SELECT coalesce(nullif(trim(kategori), ''), 'Uncategorized') AS kategori,
               count(*) AS n
        FROM designs
        WHERE architect_id = $1
        GROUP BY 1
        ORDER BY 1
        """,
        architect_id,
        context="Failed to compute design statistics",
    )
    categories = {str(r["kategori"]): int(r["n"]) for r in rows}
    return {"total": sum(categories.values()), "categories": categories}


async def distinct_kategori() -> list[str]:
    rows = await db.fetch_all(
        """
        SELECT DISTINCT kategori
        FROM designs
        WHERE kategori IS NOT NULL
          AND trim(kategori) <> ''
        ORDER BY kategori
        """,
        context="Failed to list design categories",
    )
    return [str(r["kategori"]) for r in rows]
