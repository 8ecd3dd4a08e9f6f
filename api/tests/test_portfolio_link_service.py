"""
Unit tests: PortfolioLinkService against an in-memory repository.
"""

import pytest

from core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from portfolio_links.service import PortfolioLinkService, is_valid_url


class InMemoryLinkRepository:
    """Same coroutines as `portfolio_links.repository`, backed by a dict."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.updates: list[tuple[str, dict]] = []

    def add(self, link_id, architect_id, url, order):
        self.rows[link_id] = {
            "id": link_id,
            "architect_id": architect_id,
            "url": url,
            "order": order,
            "created_at": None,
        }
        return dict(self.rows[link_id])

    async def get_link(self, link_id):
        row = self.rows.get(link_id)
        return dict(row) if row else None

    async def list_for_architect(self, architect_id):
        rows = [dict(r) for r in self.rows.values() if r["architect_id"] == architect_id]
        return sorted(rows, key=lambda r: r["order"])

    async def url_exists(self, architect_id, url, *, exclude_id=None):
        return any(
            r["architect_id"] == architect_id and r["url"] == url and r["id"] != exclude_id
            for r in self.rows.values()
        )

    async def next_order(self, architect_id):
        orders = [r["order"] for r in self.rows.values() if r["architect_id"] == architect_id]
        return max(orders) + 1 if orders else 0

    async def create_link(self, architect_id, *, url, order):
        return self.add(f"link-{len(self.rows) + 1}", architect_id, url, order)

    async def update_link(self, link_id, fields):
        self.updates.append((link_id, fields))
        self.rows[link_id].update(fields)
        return dict(self.rows[link_id])

    async def reorder(self, architect_id, ordered_ids):
        owned = [i for i in ordered_ids if i in self.rows and self.rows[i]["architect_id"] == architect_id]
        if len(owned) != len(ordered_ids):
            return None
        for index, link_id in enumerate(ordered_ids):
            self.rows[link_id]["order"] = index
        return [dict(self.rows[i]) for i in ordered_ids]

    async def delete_link(self, link_id):
        return self.rows.pop(link_id, None) is not None


@pytest.fixture
def links():
    return InMemoryLinkRepository()


@pytest.fixture
def service(links, architect_repo):
    return PortfolioLinkService(repository=links, architects=architect_repo)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://behance.net/budi", True),
        ("http://example.com/portfolio?page=2", True),
        ("not-a-url", False),
        ("ftp://files.example.com", False),
    ],
)
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


class TestCreate:
    async def test_orders_are_assigned_in_sequence(self, service):
        first = await service.create_portfolio_link("arch-1", {"url": "https://a.example.com"})
        second = await service.create_portfolio_link("arch-1", {"url": " https://b.example.com "})

        assert first["order"] == 0
        assert second["order"] == 1
        assert second["url"] == "https://b.example.com"
        assert set(second) == {"id", "url", "order", "created_at"}

    @pytest.mark.parametrize(
        "data, message",
        [
            ({}, "URL is required"),
            ({"url": "   "}, "URL is required"),
            ({"url": "not-a-url"}, "Invalid URL format"),
        ],
    )
    async def test_invalid_url_is_rejected(self, service, links, data, message):
        with pytest.raises(ValidationError) as excinfo:
            await service.create_portfolio_link("arch-1", data)

        assert excinfo.value.errors == [{"field": "url", "message": message}]
        assert links.rows == {}

    async def test_duplicate_url_for_same_architect_conflicts(self, service, links):
        links.add("l1", "arch-1", "https://a.example.com", 0)

        with pytest.raises(ConflictError, match="already exists"):
            await service.create_portfolio_link("arch-1", {"url": "https://a.example.com"})

    async def test_same_url_for_another_architect_is_allowed(self, service, links):
        links.add("l1", "arch-1", "https://a.example.com", 0)

        created = await service.create_portfolio_link("arch-2", {"url": "https://a.example.com"})

        assert created["order"] == 0

    async def test_unknown_architect_is_not_found(self, service, links):
        with pytest.raises(NotFoundError, match="Architect not found"):
            await service.create_portfolio_link("ghost", {"url": "https://a.example.com"})

        assert links.rows == {}


class TestReorder:
    async def test_orders_follow_the_given_sequence(self, service, links):
        links.add("A", "arch-1", "https://a.example.com", 0)
        links.add("B", "arch-1", "https://b.example.com", 1)
        links.add("C", "arch-1", "https://c.example.com", 2)

        result = await service.reorder_portfolio_links("arch-1", ["C", "A", "B"])

        assert [link["id"] for link in result] == ["C", "A", "B"]
        assert {i: links.rows[i]["order"] for i in "ABC"} == {"C": 0, "A": 1, "B": 2}

    async def test_foreign_link_aborts_without_changes(self, service, links):
        links.add("A", "arch-1", "https://a.example.com", 0)
        links.add("X", "arch-2", "https://x.example.com", 0)

        with pytest.raises(AuthorizationError, match="do not belong to you"):
            await service.reorder_portfolio_links("arch-1", ["X", "A"])

        assert links.rows["A"]["order"] == 0
        assert links.rows["X"]["order"] == 0

    async def test_unknown_id_aborts(self, service, links):
        links.add("A", "arch-1", "https://a.example.com", 0)

        with pytest.raises(AuthorizationError):
            await service.reorder_portfolio_links("arch-1", ["A", "missing"])

    async def test_duplicate_ids_are_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.reorder_portfolio_links("arch-1", ["A", "A"])

    async def test_empty_list_is_a_no_op(self, service):
        assert await service.reorder_portfolio_links("arch-1", []) == []


class TestUpdate:
    async def test_non_owner_is_forbidden(self, service, links):
        links.add("l1", "arch-2", "https://a.example.com", 0)

        with pytest.raises(AuthorizationError, match="permission to update this portfolio link"):
            await service.update_portfolio_link("l1", "arch-1", {"url": "https://b.example.com"})

        assert links.updates == []

    async def test_url_conflict_excludes_the_link_itself(self, service, links):
        links.add("l1", "arch-1", "https://a.example.com", 0)
        links.add("l2", "arch-1", "https://b.example.com", 1)

        same = await service.update_portfolio_link("l1", "arch-1", {"url": "https://a.example.com"})
        assert same["url"] == "https://a.example.com"

        with pytest.raises(ConflictError):
            await service.update_portfolio_link("l1", "arch-1", {"url": "https://b.example.com"})

    async def test_order_is_overwritten_without_renumbering(self, service, links):
        links.add("l1", "arch-1", "https://a.example.com", 0)
        links.add("l2", "arch-1", "https://b.example.com", 1)

        updated = await service.update_portfolio_link("l1", "arch-1", {"order": 1})

        assert updated["order"] == 1
        assert links.rows["l2"]["order"] == 1

    async def test_no_fields_returns_current_link(self, service, links):
        links.add("l1", "arch-1", "https://a.example.com", 3)

        current = await service.update_portfolio_link("l1", "arch-1", {})

        assert current["order"] == 3
        assert links.updates == []

    async def test_missing_link_is_not_found(self, service):
        with pytest.raises(NotFoundError, match="Portfolio link not found"):
            await service.update_portfolio_link("nope", "arch-1", {"order": 1})


class TestDelete:
    async def test_owner_can_delete(self, service, links):
        links.add("l1", "arch-1", "https://a.example.com", 0)

        result = await service.delete_portfolio_link("l1", "arch-1")

        assert result["success"] is True
        assert "l1" not in links.rows

    async def test_non_owner_cannot_delete(self, service, links):
        links.add("l1", "arch-2", "https://a.example.com", 0)

        with pytest.raises(AuthorizationError):
            await service.delete_portfolio_link("l1", "arch-1")

        assert "l1" in links.rows
