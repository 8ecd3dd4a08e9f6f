"""
Arsipedia business logic.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from core.errors import BadRequestError, NotFoundError
from core.storage import FileStorage, get_storage

from . import repository as arsipedia_repository

logger = logging.getLogger(__name__)


def _dump(values: list[str]) -> str:
    return json.dumps(values, ensure_ascii=False, separators=(",", ":"))


def normalize_tags(tags: Any) -> str:
    """
    Normalize tags to a JSON array string.

    - list/tuple        -> items as strings
    - JSON array string -> items as strings
    - other string      -> comma-split, trimmed, empties dropped
    - anything else     -> "[]"
    """
    if not tags:
        return "[]"

    if isinstance(tags, (list, tuple)):
        return _dump([str(t) for t in tags])

    if isinstance(tags, str):
        s = tags.strip()
        if not s:
            return "[]"
        try:
            parsed = json.loads(s)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return _dump([str(t) for t in parsed])
        return _dump([part.strip() for part in s.split(",") if part.strip()])

    return "[]"


class ArsipediaService:
    def __init__(self, *, repository: Any, storage: FileStorage) -> None:
        self.repository = repository
        self.storage = storage

    async def create(self, data: dict[str, Any]) -> dict:
        image_path = data.get("image_path")
        with self.storage.lifecycle([image_path]):
            admin = await self.repository.find_admin(data.get("admin_id"))
            if not admin:
                raise BadRequestError("Invalid adminId: Admin not found")

            if not image_path:
                raise BadRequestError("Image is required")

            payload = {**data, "tags": normalize_tags(data.get("tags"))}
            created = await self.repository.create_entry(payload)

        logger.info("arsipedia_created entry_id=%s admin_id=%s", created.get("id"), data.get("admin_id"))
        return created

    async def get_all(self) -> list[dict]:
        return await self.repository.list_entries()

    async def get_by_id(self, entry_id: str) -> dict:
        entry = await self.repository.get_entry(entry_id)
        if not entry:
            raise NotFoundError("Arsipedia entry not found")
        return entry

    async def update(self, entry_id: str, data: dict[str, Any]) -> dict:
        await self.get_by_id(entry_id)

        # null clears tags; for every other column it means "leave unchanged"
        payload = {k: v for k, v in data.items() if v is not None or k == "tags"}
        if "tags" in payload:
            payload["tags"] = normalize_tags(payload["tags"])

        updated = await self.repository.update_entry(entry_id, payload)
        if not updated:
            raise NotFoundError("Arsipedia entry not found")

        logger.info("arsipedia_updated entry_id=%s", entry_id)
        return updated

    async def delete(self, entry_id: str) -> dict | None:
        existing = await self.get_by_id(entry_id)

        with self.storage.lifecycle() as files:
            files.retire([existing.get("image_path")])
            deleted = await self.repository.delete_entry(entry_id)

        logger.info("arsipedia_deleted entry_id=%s", entry_id)
        return deleted


def get_arsipedia_service() -> ArsipediaService:
    return ArsipediaService(repository=arsipedia_repository, storage=get_storage())
