"""
Pydantic schemas for arsipedia endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ArsipediaUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    # list, comma-separated string, or JSON array string
    tags: list[str] | str | None = None
