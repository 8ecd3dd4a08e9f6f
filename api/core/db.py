"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Store failures surface as `DatabaseError` with the caller's context prepended.
`fetch_one(..., conflict=message)` turns a unique violation into `ConflictError`.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import ConflictError, DatabaseError

_pool: asyncpg.Pool | None = None


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=1,
        max_size=10,
        command_timeout=30,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _wrap(exc: asyncpg.PostgresError, context: str) -> DatabaseError:
    return DatabaseError(f"{context}: {exc}")


async def fetch_one(
    sql: str,
    *args: Any,
    context: str = "Query failed",
    conflict: str | None = None,
) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    try:
        row = await pool().fetchrow(sql, *args)
    except asyncpg.UniqueViolationError as exc:
        if conflict is not None:
            raise ConflictError(conflict) from exc
        raise _wrap(exc, context) from exc
    except asyncpg.PostgresError as exc:
        raise _wrap(exc, context) from exc
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any, context: str = "Query failed") -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    try:
        rows = await pool().fetch(sql, *args)
    except asyncpg.PostgresError as exc:
        raise _wrap(exc, context) from exc
    return [dict(r) for r in rows]


async def fetch_value(sql: str, *args: Any, context: str = "Query failed") -> Any:
    try:
        return await pool().fetchval(sql, *args)
    except asyncpg.PostgresError as exc:
        raise _wrap(exc, context) from exc


async def execute(sql: str, *args: Any, context: str = "Statement failed") -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag, e.g. "DELETE 1".
    """
    try:
        return await pool().execute(sql, *args)
    except asyncpg.PostgresError as exc:
        raise _wrap(exc, context) from exc


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire one connection and run the block inside a transaction.
    """
    async with pool().acquire() as conn:  # type: asyncpg.Connection
        async with conn.transaction():
            yield conn
