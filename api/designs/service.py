"""
Design business logic.

Scope:
- validation and ownership checks before any write
- photo path lists stored as JSON text, returned as public URLs
- file cleanup scoped around the row mutation (see `FileStorage.lifecycle`)

Collaborators are injected so tests can pass fakes:
- repository: `designs.repository` (or anything with the same coroutines)
- architects: `architects.repository`
- storage: `core.storage.FileStorage`
"""

from __future__ import annotations

import json
import logging
from typing import Any

from architects import repository as architect_repository
from architects.service import require_architect
from core.errors import NotFoundError, ValidationError
from core.ownership import OWNER_ONLY, OwnershipPolicy
from core.storage import FileStorage, get_storage

from . import repository as design_repository

PHOTO_FIELDS = ("foto_bangunan", "foto_denah")
TEXT_FIELDS = ("description", "kategori", "luas_bangunan", "luas_tanah")

TITLE_MAX_LENGTH = 200
MAX_PAGE_LIMIT = 100

logger = logging.getLogger(__name__)


def parse_json_array(value: Any) -> list:
    """
    Decode a JSON-encoded array column. Null, empty, malformed or non-list values give [].
    """
    if not value:
        return []
    if isinstance(value, list):
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return []
    return parsed if isinstance(parsed, list) else []


def dump_json_array(values: list) -> str:
    return json.dumps([str(v) for v in values], separators=(",", ":"))


def validate_design_data(data: dict[str, Any]) -> None:
    errors: list[dict[str, str]] = []

    title = data.get("title")
    if title is None or not str(title).strip():
        errors.append({"field": "title", "message": "Title is required"})
    elif len(str(title)) > TITLE_MAX_LENGTH:
        errors.append({"field": "title", "message": f"Title must be at most {TITLE_MAX_LENGTH} characters"})

    if errors:
        raise ValidationError("Validation failed", errors)


def _list_options(page: int, limit: int, order_by: str = "created_at", direction: str = "desc") -> dict[str, Any]:
    errors: list[dict[str, str]] = []
    if page < 1:
        errors.append({"field": "page", "message": "Page must be >= 1"})
    if limit < 1 or limit > MAX_PAGE_LIMIT:
        errors.append({"field": "limit", "message": f"Limit must be between 1 and {MAX_PAGE_LIMIT}"})
    if order_by not in design_repository.ORDERABLE_COLUMNS:
        errors.append(
            {"field": "order_by", "message": f"order_by must be one of {sorted(design_repository.ORDERABLE_COLUMNS)}"}
        )
    direction = (direction or "").lower()
    if direction not in design_repository.DIRECTIONS:
        errors.append({"field": "direction", "message": "direction must be 'asc' or 'desc'"})
    if errors:
        raise ValidationError("Validation failed", errors)
    return {"page": page, "limit": limit, "order_by": order_by, "direction": direction}


class DesignService:
    def __init__(self, *, repository: Any, architects: Any, storage: FileStorage) -> None:
        self.repository = repository
        self.architects = architects
        self.storage = storage

    def _uploaded_paths(self, files: dict[str, list[str]]) -> list[str]:
        return [path for name in PHOTO_FIELDS for path in files.get(name) or []]

    async def create_design(
        self,
        architect_id: str,
        data: dict[str, Any],
        files: dict[str, list[str]] | None = None,
    ) -> dict:
        files = files or {}
        with self.storage.lifecycle(self._uploaded_paths(files)):
            validate_design_data(data)
            await require_architect(self.architects, architect_id)

            payload = {
                "title": data["title"],
                "description": data.get("description") or None,
                "kategori": data.get("kategori") or None,
                "luas_bangunan": data.get("luas_bangunan") or None,
                "luas_tanah": data.get("luas_tanah") or None,
                "foto_bangunan": dump_json_array(files.get("foto_bangunan") or []),
                "foto_denah": dump_json_array(files.get("foto_denah") or []),
            }
            design = await self.repository.create_design(architect_id, payload)

        logger.info("design_created design_id=%s architect_id=%s", design["id"], architect_id)
        return self.format_design_response(design)

    async def get_design_by_id(self, design_id: str, include_architect: bool = False) -> dict:
        design = await self.repository.get_design(design_id, include_architect=include_architect)
        if design is None:
            raise NotFoundError("Design not found")
        return self.format_design_response(design)

    def _format_page(self, result: dict[str, Any]) -> dict[str, Any]:
        return {
            "data": [self.format_design_response(d) for d in result["data"]],
            "pagination": result["pagination"],
        }

    async def get_designs_by_architect(
        self,
        architect_id: str,
        *,
        page: int = 1,
        limit: int = 10,
        order_by: str = "created_at",
        direction: str = "desc",
    ) -> dict[str, Any]:
        result = await self.repository.list_by_architect(
            architect_id,
            **_list_options(page, limit, order_by, direction),
        )
        return self._format_page(result)

    async def get_all_designs(
        self,
        *,
        page: int = 1,
        limit: int = 12,
        order_by: str = "created_at",
        direction: str = "desc",
    ) -> dict[str, Any]:
        result = await self.repository.list_all(**_list_options(page, limit, order_by, direction))
        return self._format_page(result)

    async def get_designs_by_kategori(self, kategori: str, *, page: int = 1, limit: int = 12) -> dict[str, Any]:
        result = await self.repository.list_by_kategori(kategori, **_list_options(page, limit))
        return self._format_page(result)

    async def get_latest_designs(self, limit: int = 10) -> list[dict]:
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            raise ValidationError(
                "Validation failed",
                [{"field": "limit", "message": f"Limit must be between 1 and {MAX_PAGE_LIMIT}"}],
            )
        designs = await self.repository.latest_designs(limit)
        return [self.format_design_response(d) for d in designs]

    async def search_designs(
        self,
        *,
        q: str | None = None,
        kategori: str | None = None,
        city: str | None = None,
        page: int = 1,
        limit: int = 12,
    ) -> dict[str, Any]:
        q = (q or "").strip()
        kategori = (kategori or "").strip()
        city = (city or "").strip()

        if not (q or kategori or city):
            return await self.get_all_designs(page=page, limit=limit)

        result = await self.repository.search_designs(
            q=q,
            kategori=kategori,
            city=city,
            **_list_options(page, limit),
        )
        return self._format_page(result)

    async def update_design(
        self,
        design_id: str,
        update_data: dict[str, Any],
        files: dict[str, list[str]] | None = None,
        *,
        actor_id: str | None = None,
        policy: OwnershipPolicy = OWNER_ONLY,
    ) -> dict:
        files = files or {}
        with self.storage.lifecycle(self._uploaded_paths(files)) as lifecycle:
            design = await self.repository.get_design(design_id)
            if design is None:
                raise NotFoundError("Design not found")

            policy.authorize(design, actor_id, action="update", resource_name="design")

            fields: dict[str, Any] = {}
            if update_data.get("title") is not None:
                validate_design_data({"title": update_data["title"]})
                fields["title"] = update_data["title"]
            # An empty value clears the column.
            for name in TEXT_FIELDS:
                if name in update_data:
                    fields[name] = update_data[name] or None

            # A new batch replaces the whole list; every old file is retired.
            for name in PHOTO_FIELDS:
                new_paths = list(files.get(name) or [])
                if new_paths:
                    lifecycle.retire(parse_json_array(design.get(name)))
                    fields[name] = dump_json_array(new_paths)

            updated = await self.repository.update_design(design_id, fields)
            if updated is None:
                raise NotFoundError("Design not found")

        logger.info("design_updated design_id=%s actor_id=%s", design_id, actor_id)
        return self.format_design_response(updated)

    async def delete_design(
        self,
        design_id: str,
        *,
        actor_id: str | None = None,
        policy: OwnershipPolicy = OWNER_ONLY,
    ) -> dict:
        design = await self.repository.get_design(design_id)
        if design is None:
            raise NotFoundError("Design not found")

        policy.authorize(design, actor_id, action="delete", resource_name="design")

        with self.storage.lifecycle() as lifecycle:
            for name in PHOTO_FIELDS:
                lifecycle.retire(parse_json_array(design.get(name)))
            deleted = await self.repository.delete_design(design_id)
            if not deleted:
                raise NotFoundError("Design not found")

        logger.info("design_deleted design_id=%s actor_id=%s", design_id, actor_id)
        return {"success": True, "message": "Design deleted successfully"}

    async def get_statistics(self, architect_id: str) -> dict[str, Any]:
        return await self.repository.statistics(architect_id)

    async def get_kategori_list(self) -> list[str]:
        return await self.repository.distinct_kategori()

    def _urls(self, value: Any) -> list[str]:
        urls = (self.storage.file_url(str(p)) for p in parse_json_array(value) if p)
        return [u for u in urls if u]

    def format_design_response(self, design: dict[str, Any]) -> dict[str, Any]:
        response: dict[str, Any] = {
            "id": design["id"],
            "title": design.get("title"),
            "description": design.get("description"),
            "kategori": design.get("kategori"),
            "luas_bangunan": design.get("luas_bangunan"),
            "luas_tanah": design.get("luas_tanah"),
            "foto_bangunan": self._urls(design.get("foto_bangunan")),
            "foto_denah": self._urls(design.get("foto_denah")),
            "architect_id": design.get("architect_id"),
            "created_at": design.get("created_at"),
            "updated_at": design.get("updated_at"),
        }

        architect = design.get("architect")
        if architect:
            response["architect"] = {
                "id": architect.get("id"),
                "name": architect.get("name"),
                "profile_picture_url": self.storage.file_url(architect.get("profile_picture_url")),
                "tahun_pengalaman": architect.get("tahun_pengalaman"),
                "area_pengalaman": architect.get("area_pengalaman"),
            }
        return response


def get_design_service() -> DesignService:
    """
    FastAPI dependency; tests override it through `app.dependency_overrides`.
    """
    return DesignService(
        repository=design_repository,
        architects=architect_repository,
        storage=get_storage(),
    )
