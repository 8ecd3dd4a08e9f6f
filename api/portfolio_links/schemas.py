"""
Pydantic schemas for portfolio-link endpoints.

Fields are optional on purpose: the service reports missing/invalid values
as field-level validation errors.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PortfolioLinkCreate(BaseModel):
    url: str | None = Field(default=None, max_length=2048)


class PortfolioLinkUpdate(BaseModel):
    url: str | None = Field(default=None, max_length=2048)
    order: int | None = None


class ReorderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ordered_ids: list[str] = Field(..., alias="orderedIds")
