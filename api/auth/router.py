"""
Login/registration endpoints for architects and admins.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from core.responses import envelope

from . import schemas, service

router = APIRouter()


@router.post("/api/architects/auth/register", status_code=status.HTTP_201_CREATED)
async def register_architect(request: schemas.RegisterRequest) -> dict:
    result = await service.register_architect(request)
    return envelope(result.model_dump(), "Architect registered successfully")


@router.post("/api/architects/auth/login")
async def login_architect(request: schemas.LoginRequest) -> dict:
    result = await service.login(request, role="architect")
    return envelope(result.model_dump(), "Login successful")


@router.post("/api/admin/auth/login")
async def login_admin(request: schemas.LoginRequest) -> dict:
    result = await service.login(request, role="admin")
    return envelope(result.model_dump(), "Login successful")
