"""
Application error taxonomy.

Services raise these; `core/responses.py` turns them into the error envelope:
{"status": "error", "message": ..., **details}
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(AppError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: list[dict[str, str]] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message, details={"errors": self.errors})


class BadRequestError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class DatabaseError(AppError):
    status_code = 500
