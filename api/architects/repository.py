"""
Architect lookups shared by the design and portfolio-link features.
"""

from __future__ import annotations

from core import db

ARCHITECT_SUMMARY_COLUMNS = """
    id, name, email, phone, city, profile_picture_url,
    tahun_pengalaman, area_pengalaman, created_at
"""


async def get_architect_by_id(architect_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {ARCHITECT_SUMMARY_COLUMNS}
        FROM architects
        WHERE id = $1
        """,
        architect_id,
        context="Failed to load architect",
    )

