"""
Design API endpoints.

- /api/architects/auth/designs/...  authenticated architect, owner-only writes
- /api/designs/...                  public catalog
- /api/admin/designs/...            admin writes, no ownership check
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status

from auth import dependencies as auth_dependencies
from core.ownership import ADMIN_OVERRIDE
from core.responses import envelope

from .service import PHOTO_FIELDS, TEXT_FIELDS, DesignService, get_design_service

router = APIRouter()

UPLOAD_FOLDER = "designs"


async def _save_photos(
    service: DesignService,
    foto_bangunan: list[UploadFile] | None,
    foto_denah: list[UploadFile] | None,
) -> dict[str, list[str]]:
    saved: dict[str, list[str]] = {}
    try:
        saved["foto_bangunan"] = await service.storage.save_uploads(foto_bangunan, UPLOAD_FOLDER)
        saved["foto_denah"] = await service.storage.save_uploads(foto_denah, UPLOAD_FOLDER)
    except BaseException:
        service.storage.delete_files(p for name in PHOTO_FIELDS for p in saved.get(name, []))
        raise
    return saved


def _provided(**fields: str | None) -> dict[str, str]:
    return {name: value for name, value in fields.items() if value is not None}


async def _submitted_fields(request: Request) -> dict[str, str]:
    """
    Text fields present in the raw form, empty values included.

    `Form(default=None)` reports an empty field as None, the same as an absent
    one; here an empty value is kept and clears the column.
    """
    form = await request.form()
    fields: dict[str, str] = {}
    for name in ("title", *TEXT_FIELDS):
        value = form.get(name)
        if isinstance(value, str):
            fields[name] = value
    return fields


# Architect (owner) routes

@router.post("/api/architects/auth/designs", status_code=status.HTTP_201_CREATED)
async def create_design(
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    kategori: str | None = Form(default=None),
    luas_bangunan: str | None = Form(default=None),
    luas_tanah: str | None = Form(default=None),
    foto_bangunan: list[UploadFile] | None = File(default=None),
    foto_denah: list[UploadFile] | None = File(default=None),
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: DesignService = Depends(get_design_service),
) -> dict:
    files = await _save_photos(service, foto_bangunan, foto_denah)
    design = await service.create_design(
        str(current_architect["id"]),
        _provided(
            title=title,
            description=description,
            kategori=kategori,
            luas_bangunan=luas_bangunan,
            luas_tanah=luas_tanah,
        ),
        files,
    )
    return envelope(design, "Design created successfully")


@router.get("/api/architects/auth/designs")
async def get_my_designs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    order_by: str = Query("created_at"),
    direction: str = Query("desc"),
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: DesignService = Depends(get_design_service),
) -> dict:
    result = await service.get_designs_by_architect(
        str(current_architect["id"]),
        page=page,
        limit=limit,
        order_by=order_by,
        direction=direction,
    )
    return envelope(result["data"], "Designs retrieved successfully", pagination=result["pagination"])


@router.get("/api/architects/auth/designs/statistics")
async def get_statistics(
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: DesignService = Depends(get_design_service),
) -> dict:
    stats = await service.get_statistics(str(current_architect["id"]))
    return envelope(stats, "Statistics retrieved successfully")


@router.put("/api/architects/auth/designs/{design_id}")
async def update_design(
    design_id: str,
    request: Request,
    foto_bangunan: list[UploadFile] | None = File(default=None),
    foto_denah: list[UploadFile] | None = File(default=None),
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: DesignService = Depends(get_design_service),
) -> dict:
    files = await _save_photos(service, foto_bangunan, foto_denah)
    design = await service.update_design(
        design_id,
        await _submitted_fields(request),
        files,
        actor_id=str(current_architect["id"]),
    )
    return envelope(design, "Design updated successfully")


@router.delete("/api/architects/auth/designs/{design_id}")
async def delete_design(
    design_id: str,
    current_architect: dict = Depends(auth_dependencies.get_current_architect),
    service: DesignService = Depends(get_design_service),
) -> dict:
    result = await service.delete_design(design_id, actor_id=str(current_architect["id"]))
    return envelope(None, result["message"])


# Public catalog routes (static paths before /{design_id})

@router.get("/api/designs")
async def get_all_designs(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    order_by: str = Query("created_at"),
    direction: str = Query("desc"),
    service: DesignService = Depends(get_design_service),
) -> dict:
    result = await service.get_all_designs(page=page, limit=limit, order_by=order_by, direction=direction)
    return envelope(result["data"], "Designs retrieved successfully", pagination=result["pagination"])


@router.get("/api/designs/search")
async def search_designs(
    q: str = Query(default="", max_length=500),
    kategori: str = Query(default="", max_length=200),
    city: str = Query(default="", max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    service: DesignService = Depends(get_design_service),
) -> dict:
    result = await service.search_designs(q=q, kategori=kategori, city=city, page=page, limit=limit)
    return envelope(result["data"], "Search completed successfully", pagination=result["pagination"])


@router.get("/api/designs/latest")
async def get_latest_designs(
    limit: int = Query(10, ge=1, le=100),
    service: DesignService = Depends(get_design_service),
) -> dict:
    designs = await service.get_latest_designs(limit)
    return envelope(designs, "Latest designs retrieved successfully")


@router.get("/api/designs/categories")
async def get_categories(
    service: DesignService = Depends(get_design_service),
) -> dict:
    categories = await service.get_kategori_list()
    return envelope(categories, "Categories retrieved successfully")


@router.get("/api/designs/category/{kategori}")
async def get_designs_by_kategori(
    kategori: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    service: DesignService = Depends(get_design_service),
) -> dict:
    result = await service.get_designs_by_kategori(kategori, page=page, limit=limit)
    return envelope(result["data"], "Designs retrieved successfully", pagination=result["pagination"])


@router.get("/api/designs/{design_id}")
async def get_design(
    design_id: str,
    service: DesignService = Depends(get_design_service),
) -> dict:
    design = await service.get_design_by_id(design_id, include_architect=True)
    return envelope(design, "Design retrieved successfully")


# Admin routes

@router.put("/api/admin/designs/{design_id}")
async def admin_update_design(
    design_id: str,
    request: Request,
    foto_bangunan: list[UploadFile] | None = File(default=None),
    foto_denah: list[UploadFile] | None = File(default=None),
    current_admin: dict = Depends(auth_dependencies.get_current_admin),
    service: DesignService = Depends(get_design_service),
) -> dict:
    files = await _save_photos(service, foto_bangunan, foto_denah)
    design = await service.update_design(
        design_id,
        await _submitted_fields(request),
        files,
        actor_id=str(current_admin["id"]),
        policy=ADMIN_OVERRIDE,
    )
    return envelope(design, "Design updated successfully")


@router.delete("/api/admin/designs/{design_id}")
async def admin_delete_design(
    design_id: str,
    current_admin: dict = Depends(auth_dependencies.get_current_admin),
    service: DesignService = Depends(get_design_service),
) -> dict:
    result = await service.delete_design(
        design_id,
        actor_id=str(current_admin["id"]),
        policy=ADMIN_OVERRIDE,
    )
    return envelope(None, result["message"])
