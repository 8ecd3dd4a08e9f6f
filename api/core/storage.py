"""
File storage helper for uploaded images.

Stored paths are relative to `UPLOAD_BASE_DIR` (default: the working
directory), e.g. `uploads/designs/<uuid>.png`. The database only ever holds
these relative paths; public URLs are derived from them on read.

Deletion is best-effort everywhere: it never raises, and failures are logged.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator
from uuid import uuid4

from fastapi import HTTPException, UploadFile

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB

UPLOAD_ROOT = "uploads"

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def upload_base_dir() -> Path:
    raw = os.environ.get("UPLOAD_BASE_DIR", "").strip()
    return Path(raw) if raw else Path.cwd()


def public_base_url_from_env() -> str:
    return os.environ.get("PUBLIC_BASE_URL", "").strip().rstrip("/")


def max_upload_bytes_from_env() -> int:
    return _env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)


def normalize_path(path: str) -> str:
    return str(path).replace("\\", "/").strip()


class FileLifecycle:
    """
    Paths involved in one store mutation.

    `new_paths` were written before the mutation and are removed if it fails.
    Paths passed to `retire()` are removed once it succeeds.
    """

    def __init__(self, new_paths: Iterable[str | None] = ()) -> None:
        self.new_paths = [p for p in new_paths if p]
        self.retired: list[str] = []

    def retire(self, paths: Iterable[str | None]) -> None:
        self.retired.extend(p for p in paths if p)


class FileStorage:
    def __init__(
        self,
        base_dir: Path | str | None = None,
        *,
        public_base_url: str | None = None,
        max_upload_bytes: int | None = None,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else upload_base_dir()
        self.public_base_url = (
            public_base_url.rstrip("/") if public_base_url is not None else public_base_url_from_env()
        )
        self.max_upload_bytes = max_upload_bytes or max_upload_bytes_from_env()

    def file_url(self, path: str | None) -> str | None:
        if not path:
            return None
        normalized = normalize_path(path)
        if normalized.startswith(("http://", "https://")):
            return normalized
        return f"{self.public_base_url}/{normalized.lstrip('/')}"

    def resolve(self, path: str | None) -> Path | None:
        """
        Map a stored path to an absolute filesystem path under `base_dir`.

        Returns None for empty paths and for paths that escape `base_dir`.
        """
        if not path:
            return None
        normalized = normalize_path(path).lstrip("/")
        if not normalized:
            return None

        base = self.base_dir.resolve()
        candidate = (base / normalized).resolve()
        if candidate != base and base not in candidate.parents:
            return None
        return candidate

    def delete_file(self, path: str | None) -> bool:
        target = self.resolve(path)
        if target is None:
            logger.warning("file_delete_skipped path=%r reason=outside_base_dir", path)
            return False

        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("file_delete_missing path=%s", target)
            return False
        except OSError as exc:
            logger.warning("file_delete_failed path=%s error=%s", target, exc)
            return False

        logger.info("file_deleted path=%s", path)
        return True

    def delete_files(self, paths: Iterable[str | None]) -> int:
        return sum(1 for p in paths if p and self.delete_file(p))

    @contextmanager
    def lifecycle(self, new_paths: Iterable[str | None] = ()) -> Iterator[FileLifecycle]:
        """
        Scope file cleanup around a store mutation.

        The block performs the mutation. On failure the freshly uploaded files
        are removed and the error propagates unchanged; on success the retired
        files are removed. Cleanup itself never raises.
        """
        files = FileLifecycle(new_paths)
        try:
            yield files
        except BaseException:
            self.delete_files(files.new_paths)
            raise
        self.delete_files(files.retired)

    async def save_upload(self, file: UploadFile, folder: str) -> str:
        """
        Write an uploaded image under `uploads/<folder>/` and return its relative path.
        """
        if not file.filename:
            raise HTTPException(status_code=400, detail="Missing filename.")

        ext = Path(file.filename).suffix.lower()
        if ext not in ALLOWED_IMAGE_EXTENSIONS:
            raise HTTPException(
                status_code=400,
                detail=f"Unsupported file type '{ext}'. Allowed: {sorted(ALLOWED_IMAGE_EXTENSIONS)}",
            )

        data = await read_upload_bytes(file, self.max_upload_bytes)

        relative = f"{UPLOAD_ROOT}/{folder}/{uuid4().hex}{ext}"
        target = self.base_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return relative

    async def save_uploads(self, files: Iterable[UploadFile] | None, folder: str) -> list[str]:
        saved: list[str] = []
        try:
            for file in files or []:
                if not file.filename:
                    continue
                saved.append(await self.save_upload(file, folder))
        except BaseException:
            # Don't leave half of a batch behind.
            self.delete_files(saved)
            raise
        return saved


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max is {max_bytes} bytes.",
            )

    return bytes(buf)


@lru_cache(maxsize=1)
def get_storage() -> FileStorage:
    """
    Process-wide storage built from the environment (FastAPI dependency).
    """
    return FileStorage()
