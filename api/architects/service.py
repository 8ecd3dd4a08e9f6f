"""
Architect checks used before writing architect-owned rows.
"""

from __future__ import annotations

from typing import Any

from core.errors import NotFoundError


async def require_architect(repository: Any, architect_id: str) -> dict:
    architect = await repository.get_architect_by_id(architect_id)
    if architect is None:
        raise NotFoundError("Architect not found")
    return architect
