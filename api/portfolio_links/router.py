"""
Portfolio-link API endpoints.

`owner_router` is mounted twice in `main.py`:
/api/architects/auth/portfolio-links and
/api/portfolio-links/architect/my-portfolio-links.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from core.responses import envelope

from . import schemas
from .service import PortfolioLinkService, get_portfolio_link_service

owner_router = APIRouter()
public_router = APIRouter()


@owner_router.post("", status_code=status.HTTP_201_CREATED)
async def create_portfolio_link(
    request: schemas.PortfolioLinkCreate,
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: PortfolioLinkService = Depends(get_portfolio_link_service),
) -> dict:
    link = await service.create_portfolio_link(str(current_architect["id"]), request.model_dump())
    return envelope(link, "Portfolio link created successfully")


@owner_router.get("")
async def get_my_portfolio_links(
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: PortfolioLinkService = Depends(get_portfolio_link_service),
) -> dict:
    links = await service.get_portfolio_links_by_architect(str(current_architect["id"]))
    return envelope(links, "Portfolio links retrieved successfully")


@owner_router.post("/reorder")
async def reorder_portfolio_links(
    request: schemas.ReorderRequest,
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: PortfolioLinkService = Depends(get_portfolio_link_service),
) -> dict:
    links = await service.reorder_portfolio_links(str(current_architect["id"]), request.ordered_ids)
    return envelope(links, "Portfolio links reordered successfully")


@owner_router.put("/{link_id}")
async def update_portfolio_link(
    link_id: str,
    request: schemas.PortfolioLinkUpdate,
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: PortfolioLinkService = Depends(get_portfolio_link_service),
) -> dict:
    link = await service.update_portfolio_link(
        link_id,
        str(current_architect["id"]),
        request.model_dump(exclude_unset=True),
    )
    return envelope(link, "Portfolio link updated successfully")


@owner_router.delete("/{link_id}")
async def delete_portfolio_link(
    link_id: str,
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: PortfolioLinkService = Depends(get_portfolio_link_service),
) -> dict:
    result = await service.delete_portfolio_link(link_id, str(current_architect["id"]))
    return envelope(None, result["message"])


@public_router.get("/api/portfolio-links/{link_id}")
async def get_portfolio_link(
    link_id: str,
    service: PortfolioLinkService = Depends(get_portfolio_link_service),
) -> dict:
    link = await service.get_portfolio_link_by_id(link_id)
    return envelope(link, "Portfolio link retrieved successfully")
