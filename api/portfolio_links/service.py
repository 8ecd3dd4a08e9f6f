"""
Portfolio link business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from architects import repository as architect_repository
from architects.service import require_architect
from core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from core.ownership import OWNER_ONLY

from . import repository as link_repository

logger = logging.getLogger(__name__)

_HTTP_URL = TypeAdapter(HttpUrl)


def is_valid_url(value: str) -> bool:
    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def validate_portfolio_link_data(data: dict[str, Any]) -> str:
    """
    Return the trimmed url or raise a field-level ValidationError.
    """
    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("Validation failed", [{"field": "url", "message": "URL is required"}])

    url = url.strip()
    if not is_valid_url(url):
        raise ValidationError("Validation failed", [{"field": "url", "message": "Invalid URL format"}])
    return url


def format_portfolio_link_response(link: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": link["id"],
        "url": link["url"],
        "order": link["order"],
        "created_at": link.get("created_at"),
    }


class PortfolioLinkService:
    def __init__(self, *, repository: Any, architects: Any) -> None:
        self.repository = repository
        self.architects = architects

    async def _get_owned(self, link_id: str, architect_id: str, *, action: str) -> dict:
        link = await self.repository.get_link(link_id)
        if link is None:
            raise NotFoundError("Portfolio link not found")
        OWNER_ONLY.authorize(link, architect_id, action=action, resource_name="portfolio link")
        return link

    async def create_portfolio_link(self, architect_id: str, data: dict[str, Any]) -> dict:
        url = validate_portfolio_link_data(data)
        await require_architect(self.architects, architect_id)

        if await self.repository.url_exists(architect_id, url):
            raise ConflictError(link_repository.DUPLICATE_URL_MESSAGE)

        order = await self.repository.next_order(architect_id)
        link = await self.repository.create_link(architect_id, url=url, order=order)

        logger.info("portfolio_link_created link_id=%s architect_id=%s order=%s", link["id"], architect_id, order)
        return format_portfolio_link_response(link)

    async def get_portfolio_link_by_id(self, link_id: str) -> dict:
        link = await self.repository.get_link(link_id)
        if link is None:
            raise NotFoundError("Portfolio link not found")
        return format_portfolio_link_response(link)

    async def get_portfolio_links_by_architect(self, architect_id: str) -> list[dict]:
        links = await self.repository.list_for_architect(architect_id)
        return [format_portfolio_link_response(link) for link in links]

    async def update_portfolio_link(self, link_id: str, architect_id: str, data: dict[str, Any]) -> dict:
        link = await self._get_owned(link_id, architect_id, action="update")

        fields: dict[str, Any] = {}
        if data.get("url") is not None:
            url = validate_portfolio_link_data(data)
            if await self.repository.url_exists(architect_id, url, exclude_id=link_id):
                raise ConflictError(link_repository.DUPLICATE_URL_MESSAGE)
            fields["url"] = url

        # Raw overwrite; siblings are not renumbered (use reorder for that).
        if data.get("order") is not None:
            try:
                fields["order"] = int(data["order"])
            except (TypeError, ValueError):
                raise ValidationError(
                    "Validation failed",
                    [{"field": "order", "message": "Order must be an integer"}],
                ) from None

        if not fields:
            return format_portfolio_link_response(link)

        updated = await self.repository.update_link(link_id, fields)
        if updated is None:
            raise NotFoundError("Portfolio link not found")

        logger.info("portfolio_link_updated link_id=%s architect_id=%s", link_id, architect_id)
        return format_portfolio_link_response(updated)

    async def reorder_portfolio_links(self, architect_id: str, ordered_ids: list[str]) -> list[dict]:
        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationError(
                "Validation failed",
                [{"field": "orderedIds", "message": "orderedIds must not contain duplicates"}],
            )

        await require_architect(self.architects, architect_id)
        if not ordered_ids:
            return []

        links = await self.repository.reorder(architect_id, list(ordered_ids))
        if links is None:
            raise AuthorizationError("One or more portfolio links do not belong to you")

        logger.info("portfolio_links_reordered architect_id=%s count=%s", architect_id, len(links))
        return [format_portfolio_link_response(link) for link in links]

    async def delete_portfolio_link(self, link_id: str, architect_id: str) -> dict:
        await self._get_owned(link_id, architect_id, action="delete")

        deleted = await self.repository.delete_link(link_id)
        if not deleted:
            raise NotFoundError("Portfolio link not found")

        logger.info("portfolio_link_deleted link_id=%s architect_id=%s", link_id, architect_id)
        return {"success": True, "message": "Portfolio link deleted successfully"}


def get_portfolio_link_service() -> PortfolioLinkService:
    return PortfolioLinkService(repository=link_repository, architects=architect_repository)
