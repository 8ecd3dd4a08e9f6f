"""
Authorization strategies for architect-owned resources.

Architect routes mutate with `OWNER_ONLY`; admin routes pass `ADMIN_OVERRIDE`
through the same service methods.
"""

from __future__ import annotations

from typing import Any

from .errors import AuthorizationError


class OwnershipPolicy:
    def authorize(
        self,
        resource: dict[str, Any],
        actor_id: str | None,
        *,
        action: str,
        resource_name: str,
    ) -> None:
        raise NotImplementedError


class OwnerOnly(OwnershipPolicy):
    def authorize(self, resource, actor_id, *, action, resource_name) -> None:
        # Exact id match; a missing actor never owns anything.
        if actor_id is None or str(resource.get("architect_id")) != str(actor_id):
            raise AuthorizationError(f"You do not have permission to {action} this {resource_name}")


class AdminOverride(OwnershipPolicy):
    def authorize(self, resource, actor_id, *, action, resource_name) -> None:
        return None


OWNER_ONLY = OwnerOnly()
ADMIN_OVERRIDE = AdminOverride()
