"""
Auth business logic.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _to_account_response(row: dict, role: str) -> schemas.AccountResponse:
    return schemas.AccountResponse(
        id=str(row["id"]),
        name=row.get("name"),
        email=str(row["email"]),
        role=role,
        created_at=row.get("created_at"),
    )


def _issue_token(row: dict, role: str) -> schemas.AuthResponse:
    access_token = security.build_access_token(
        account_id=str(row["id"]),
        email=str(row["email"]),
        role=role,
    )
    return schemas.AuthResponse(account=_to_account_response(row, role), access_token=access_token)


async def register_architect(payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    existing = await repository.get_account_by_email("architect", payload.email)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    password_hash = security.hash_password(payload.password)
    row = await repository.create_architect(
        name=payload.name,
        email=payload.email,
        password_hash=password_hash,
    )
    logger.info("architect_registered architect_id=%s", row["id"])
    return _issue_token(row, "architect")


async def login(payload: schemas.LoginRequest, *, role: str) -> schemas.AuthResponse:
    row = await repository.get_account_by_email(role, payload.email)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    is_valid = security.verify_password(payload.password, str(row.get("password_hash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    return _issue_token(row, role)


async def get_account_from_access_token(access_token: str, *, role: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    if payload.get("role") != role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"This endpoint requires a {role} account.",
        )

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token subject.",
        )

    row = await repository.get_account_by_id(role, subject)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found.",
        )
    return row
