"""
Repository tests: generated SQL and arguments, reorder transaction flow, and
how store errors are mapped. `core.db` is patched; no database is needed.
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import asyncpg
import pytest

from arsipedia import repository as arsipedia_repository
from core import db
from core.errors import ConflictError, DatabaseError
from designs import repository as design_repository
from portfolio_links import repository as link_repository


def flat(sql: str) -> str:
    return " ".join(sql.split())


@pytest.fixture
def fake_db(monkeypatch):
    fetch_value = AsyncMock(return_value=0)
    fetch_all = AsyncMock(return_value=[])
    fetch_one = AsyncMock(return_value=None)
    monkeypatch.setattr(db, "fetch_value", fetch_value)
    monkeypatch.setattr(db, "fetch_all", fetch_all)
    monkeypatch.setattr(db, "fetch_one", fetch_one)
    return SimpleNamespace(fetch_value=fetch_value, fetch_all=fetch_all, fetch_one=fetch_one)


@pytest.fixture
def fake_pool(monkeypatch):
    pool = SimpleNamespace(fetchrow=AsyncMock())
    monkeypatch.setattr(db, "_pool", pool)
    return pool


class TestDesignSearch:
    async def test_all_terms_are_combined_with_and(self, fake_db):
        fake_db.fetch_value.return_value = 12

        result = await design_repository.search_designs(
            q="x",
            kategori="Modern",
            city="Bandung",
            page=2,
            limit=5,
            order_by="created_at",
            direction="desc",
        )

        sql = flat(fake_db.fetch_all.await_args.args[0])
        assert (
            "WHERE (strpos(lower(d.title), lower($1)) > 0"
            " OR strpos(lower(coalesce(d.description, '')), lower($1)) > 0)"
            " AND lower(d.kategori) = lower($2)"
            " AND strpos(lower(coalesce(a.city, '')), lower($3)) > 0"
        ) in sql
        assert "ORDER BY d.created_at DESC, d.id DESC LIMIT $4 OFFSET $5" in sql
        assert fake_db.fetch_all.await_args.args[1:] == ("x", "Modern", "Bandung", 5, 5)
        assert fake_db.fetch_value.await_args.args[1:] == ("x", "Modern", "Bandung")
        assert result["pagination"] == {"page": 2, "limit": 5, "total": 12, "total_pages": 3}

    async def test_city_only_filters_through_architect_join(self, fake_db):
        await design_repository.search_designs(city="Bandung", page=1, limit=12)

        count_sql = flat(fake_db.fetch_value.await_args.args[0])
        assert "LEFT JOIN architects a ON a.id = d.architect_id" in count_sql
        assert "WHERE strpos(lower(coalesce(a.city, '')), lower($1)) > 0" in count_sql
        assert fake_db.fetch_all.await_args.args[1:] == ("Bandung", 12, 0)

    async def test_no_terms_match_everything(self, fake_db):
        result = await design_repository.search_designs(page=1, limit=12)

        assert "WHERE TRUE" in flat(fake_db.fetch_all.await_args.args[0])
        assert result == {
            "data": [],
            "pagination": {"page": 1, "limit": 12, "total": 0, "total_pages": 0},
        }

    async def test_category_route_is_substring_match(self, fake_db):
        await design_repository.list_by_kategori("mod", page=1, limit=12)

        sql = flat(fake_db.fetch_all.await_args.args[0])
        assert "WHERE strpos(lower(coalesce(d.kategori, '')), lower($1)) > 0" in sql

    async def test_unknown_ordering_never_reaches_sql(self, fake_db):
        with pytest.raises(ValueError):
            await design_repository.list_all(page=1, limit=12, order_by="id; DROP TABLE designs", direction="desc")

        fake_db.fetch_all.assert_not_awaited()

    async def test_rows_get_nested_architect(self, fake_db):
        fake_db.fetch_value.return_value = 2
        fake_db.fetch_all.return_value = [
            {"id": "d1", "architect__id": "arch-1", "architect__name": "Budi"},
            {"id": "d2", "architect__id": None, "architect__name": None},
        ]

        result = await design_repository.list_all(page=1, limit=12)

        assert result["data"][0] == {"id": "d1", "architect": {"id": "arch-1", "name": "Budi"}}
        assert result["data"][1] == {"id": "d2"}


class TestUpdateStatements:
    async def test_design_update_sets_given_columns_only(self, fake_db):
        await design_repository.update_design("d1", {"description": None, "title": "Villa"})

        sql = flat(fake_db.fetch_one.await_args.args[0])
        assert "SET title = $2, description = $3, updated_at = now() WHERE id = $1" in sql
        assert fake_db.fetch_one.await_args.args[1:] == ("d1", "Villa", None)

    async def test_arsipedia_update_without_fields_only_touches_timestamp(self, fake_db):
        await arsipedia_repository.update_entry("a1", {})

        assert "SET updated_at = now() WHERE id = $1" in flat(fake_db.fetch_one.await_args.args[0])
        assert fake_db.fetch_one.await_args.args[1:] == ("a1",)


class FakeConnection:
    def __init__(self, owned, rows=()):
        self.fetch = AsyncMock(side_effect=[list(owned), list(rows)])
        self.executemany = AsyncMock()


def use_connection(monkeypatch, conn):
    @asynccontextmanager
    async def transaction():
        yield conn

    monkeypatch.setattr(db, "transaction", transaction)


class TestReorder:
    async def test_assigns_positions_and_returns_given_order(self, monkeypatch):
        conn = FakeConnection(
            owned=[{"id": "A"}, {"id": "B"}, {"id": "C"}],
            rows=[{"id": "A", "order": 1}, {"id": "B", "order": 2}, {"id": "C", "order": 0}],
        )
        use_connection(monkeypatch, conn)

        result = await link_repository.reorder("arch-1", ["C", "A", "B"])

        assert [r["id"] for r in result] == ["C", "A", "B"]
        lock_sql = flat(conn.fetch.await_args_list[0].args[0])
        assert "FOR UPDATE" in lock_sql
        assert conn.fetch.await_args_list[0].args[1:] == ("arch-1", ["C", "A", "B"])
        update_sql, params = conn.executemany.await_args.args
        assert flat(update_sql) == 'UPDATE portfolio_links SET "order" = $2 WHERE id = $1'
        assert params == [("C", 0), ("A", 1), ("B", 2)]

    async def test_foreign_id_writes_nothing(self, monkeypatch):
        conn = FakeConnection(owned=[{"id": "A"}])
        use_connection(monkeypatch, conn)

        assert await link_repository.reorder("arch-1", ["A", "X"]) is None

        conn.executemany.assert_not_awaited()
        assert conn.fetch.await_count == 1

    async def test_store_failure_is_database_error(self, monkeypatch):
        conn = FakeConnection(owned=[])
        conn.fetch.side_effect = asyncpg.DeadlockDetectedError("deadlock detected")
        use_connection(monkeypatch, conn)

        with pytest.raises(DatabaseError, match="Failed to reorder portfolio links"):
            await link_repository.reorder("arch-1", ["A"])


class TestUniqueViolations:
    async def test_duplicate_link_url_on_create_is_conflict(self, fake_pool):
        fake_pool.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(ConflictError, match="This portfolio link already exists"):
            await link_repository.create_link("arch-1", url="https://a.example.com", order=0)

    async def test_duplicate_link_url_on_update_is_conflict(self, fake_pool):
        fake_pool.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(ConflictError):
            await link_repository.update_link("l1", {"url": "https://a.example.com"})

    async def test_unmapped_unique_violation_is_database_error(self, fake_pool):
        fake_pool.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(DatabaseError, match="Failed to create design"):
            await design_repository.create_design("arch-1", {"title": "Villa"})

    async def test_rows_are_returned_as_dicts(self, fake_pool):
        fake_pool.fetchrow.return_value = {"id": "l1", "url": "https://a.example.com"}

        assert await link_repository.get_link("l1") == {"id": "l1", "url": "https://a.example.com"}
