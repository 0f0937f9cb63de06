"""Policy store contract.

Three logical collections, all tenant-qualified:
- Roles: custom role documents (``name``, ``permissions``, ``resourcePermissions``)
  plus one optional member-role customization per tenant.
- UserOverrides: one document per (principal, tenant).
- Resource listings: ids per (tenant, category), used by authoring tools
  and ``accessible_resources()``; the decision engine never enumerates them.

Implementations raise :class:`~accesscore.exceptions.StoreUnavailable` on
timeouts and connection failures. They hold no decision logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class RoleRecord:
    """A stored role document and its internal id.

    ``record_id`` values sort in creation order; the resolver relies on it
    to break duplicate-name ties.
    """

    record_id: str
    document: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.document.get("name") or "")


class PolicyStore(ABC):
    """Persistence for roles, member customizations, overrides and listings."""

    # ── Roles ───────────────────────────────────────────────────

    @abstractmethod
    def find_roles(self, tenant_id: str, name: str) -> list[RoleRecord]:
        """Roles in ``tenant_id`` whose name equals ``name`` exactly."""
        raise NotImplementedError

    @abstractmethod
    def list_roles(self, tenant_id: str) -> list[RoleRecord]:
        raise NotImplementedError

    @abstractmethod
    def save_role(self, tenant_id: str, document: dict[str, Any], record_id: Optional[str] = None) -> str:
        """Insert (no ``record_id``) or replace a role. Returns the record id."""
        raise NotImplementedError

    @abstractmethod
    def delete_role(self, tenant_id: str, record_id: str) -> None:
        raise NotImplementedError

    # ── Member customization ────────────────────────────────────

    @abstractmethod
    def get_member_role(self, tenant_id: str) -> Optional[dict[str, Any]]:
        """The tenant's persisted member module table, or None."""
        raise NotImplementedError

    @abstractmethod
    def save_member_role(self, tenant_id: str, permissions: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_member_role(self, tenant_id: str) -> None:
        raise NotImplementedError

    # ── User overrides ──────────────────────────────────────────

    @abstractmethod
    def get_user_override(self, principal_id: str, tenant_id: str) -> Optional[dict[str, Any]]:
        """The override document for (principal, tenant), or None."""
        raise NotImplementedError

    @abstractmethod
    def save_user_override(self, principal_id: str, tenant_id: str, document: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_user_override(self, principal_id: str, tenant_id: str) -> None:
        raise NotImplementedError

    # ── Resource listings ───────────────────────────────────────

    @abstractmethod
    def list_resources(self, tenant_id: str, category: str) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def add_resource(self, tenant_id: str, category: str, resource_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_resource(self, tenant_id: str, category: str, resource_id: str) -> None:
        raise NotImplementedError


__all__ = ["PolicyStore", "RoleRecord"]
