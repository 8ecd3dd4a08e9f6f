"""
Shared fixtures: a FileStorage rooted in a temp dir and AsyncMock repositories.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from core.storage import FileStorage


@pytest.fixture
def storage(tmp_path):
    return FileStorage(tmp_path, public_base_url="http://cdn.test", max_upload_bytes=1024)


@pytest.fixture
def make_file(storage):
    """Create a file under the storage root and return its stored (relative) path."""

    def _make(relative: str, content: bytes = b"img") -> str:
        target = storage.base_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return relative

    return _make


@pytest.fixture
def architect_repo():
    known = {
        "arch-1": {"id": "arch-1", "name": "Budi"},
        "arch-2": {"id": "arch-2", "name": "Sari"},
    }
    return SimpleNamespace(get_architect_by_id=AsyncMock(side_effect=lambda architect_id: known.get(architect_id)))


@pytest.fixture
def design_repo():
    return SimpleNamespace(
        create_design=AsyncMock(),
        get_design=AsyncMock(return_value=None),
        list_by_architect=AsyncMock(),
        list_all=AsyncMock(),
        list_by_kategori=AsyncMock(),
        search_designs=AsyncMock(),
        latest_designs=AsyncMock(return_value=[]),
        update_design=AsyncMock(),
        delete_design=AsyncMock(return_value=True),
        statistics=AsyncMock(),
        distinct_kategori=AsyncMock(return_value=[]),
    )


@pytest.fixture
def arsipedia_repo():
    return SimpleNamespace(
        find_admin=AsyncMock(return_value=None),
        create_entry=AsyncMock(),
        list_entries=AsyncMock(return_value=[]),
        get_entry=AsyncMock(return_value=None),
        update_entry=AsyncMock(),
        delete_entry=AsyncMock(),
    )
