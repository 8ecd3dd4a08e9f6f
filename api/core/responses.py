"""
Response envelope and exception handlers.

Success: {"status": "success", "message": ..., "data": ...}
Error:   {"status": "error", "message": ..., **details}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .errors import AppError

logger = logging.getLogger(__name__)


def envelope(data: Any = None, message: str = "Success", **extra: Any) -> dict:
    body: dict[str, Any] = {"status": "success", "message": message, "data": data}
    body.update(extra)
    return body


def _error_response(status_code: int, message: str, details: dict[str, Any] | None = None) -> JSONResponse:
    body: dict[str, Any] = {"status": "error", "message": message}
    if details:
        body.update(details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("app_error status=%s message=%s", exc.status_code, exc.message)
    return _error_response(exc.status_code, exc.message, exc.details)


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    details = None if isinstance(exc.detail, str) else {"detail": exc.detail}
    response = _error_response(exc.status_code, message, details)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for item in exc.errors():
        # loc looks like ("body", "orderedIds") or ("query", "page")
        loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(loc) or "request", "message": str(item.get("msg", "Invalid value"))})
    return _error_response(400, "Validation failed", {"errors": errors})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return _error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
