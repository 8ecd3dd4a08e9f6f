"""
Arsipedia API endpoints. Reads are public; writes need an admin token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from auth import dependencies as auth_dependencies
from core.responses import envelope

from . import schemas
from .service import ArsipediaService, get_arsipedia_service

router = APIRouter(prefix="/api/arsipedia")

UPLOAD_FOLDER = "arsipedia_images"


@router.get("")
async def get_all(service: ArsipediaService = Depends(get_arsipedia_service)) -> dict:
    entries = await service.get_all()
    return envelope(entries, "Arsipedia retrieved")


@router.get("/{entry_id}")
async def get_by_id(
    entry_id: str,
    service: ArsipediaService = Depends(get_arsipedia_service),
) -> dict:
    entry = await service.get_by_id(entry_id)
    return envelope(entry, "Arsipedia retrieved")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create(
    title: str = Form(..., min_length=1, max_length=300),
    tags: str | None = Form(default=None),
    admin_id: str | None = Form(default=None),
    image: UploadFile | None = File(default=None),
    current_admin: dict = Depends(auth_dependencies.get_current_admin),
    service: ArsipediaService = Depends(get_arsipedia_service),
) -> dict:
    image_path = None
    if image is not None and image.filename:
        image_path = await service.storage.save_upload(image, UPLOAD_FOLDER)

    entry = await service.create(
        {
            "admin_id": admin_id or str(current_admin["id"]),
            "title": title,
            "tags": tags,
            "image_path": image_path,
        }
    )
    return envelope(entry, "Arsipedia created")


@router.put("/{entry_id}")
async def update(
    entry_id: str,
    request: schemas.ArsipediaUpdate,
    _: dict = Depends(auth_dependencies.get_current_admin),
    service: ArsipediaService = Depends(get_arsipedia_service),
) -> dict:
    entry = await service.update(entry_id, request.model_dump(exclude_unset=True))
    return envelope(entry, "Arsipedia updated")


@router.delete("/{entry_id}")
async def delete(
    entry_id: str,
    _: dict = Depends(auth_dependencies.get_current_admin),
    service: ArsipediaService = Depends(get_arsipedia_service),
) -> dict:
    deleted = await service.delete(entry_id)
    return envelope(deleted, "Arsipedia deleted")
