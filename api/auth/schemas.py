"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class AccountResponse(BaseModel):
    id: str
    name: str | None = None
    email: str
    role: str
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    account: AccountResponse
    access_token: str
    token_type: str = "bearer"
