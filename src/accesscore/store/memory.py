"""In-process policy store.

Thread-safe and read-after-write consistent. Documents are deep-copied on
the way in and out so callers can never mutate stored state in place.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from typing import Any, Optional

from .base import PolicyStore, RoleRecord

logger = logging.getLogger(__name__)


class InMemoryPolicyStore(PolicyStore):
    """Dict-backed :class:`PolicyStore` for tests and single-process deployments."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._seq = itertools.count(1)
        self._roles: dict[str, dict[str, dict[str, Any]]] = {}
        self._member_roles: dict[str, dict[str, Any]] = {}
        self._overrides: dict[tuple[str, str], dict[str, Any]] = {}
        self._resources: dict[tuple[str, str], dict[str, None]] = {}

    # ── Roles ───────────────────────────────────────────────────

    def find_roles(self, tenant_id: str, name: str) -> list[RoleRecord]:
        return [record for record in self.list_roles(tenant_id) if record.name == name]

    def list_roles(self, tenant_id: str) -> list[RoleRecord]:
        with self._lock:
            roles = self._roles.get(tenant_id, {})
            return [RoleRecord(record_id=rid, document=copy.deepcopy(doc)) for rid, doc in sorted(roles.items())]

    def save_role(self, tenant_id: str, document: dict[str, Any], record_id: Optional[str] = None) -> str:
        with self._lock:
            if record_id is None:
                record_id = f"{next(self._seq):010d}"
            self._roles.setdefault(tenant_id, {})[record_id] = copy.deepcopy(document)
        logger.debug("Saved role %s (%s) for tenant %s", record_id, document.get("name"), tenant_id)
        return record_id

    def delete_role(self, tenant_id: str, record_id: str) -> None:
        with self._lock:
            self._roles.get(tenant_id, {}).pop(record_id, None)

    # ── Member customization ────────────────────────────────────

    def get_member_role(self, tenant_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            permissions = self._member_roles.get(tenant_id)
            return copy.deepcopy(permissions) if permissions is not None else None

    def save_member_role(self, tenant_id: str, permissions: dict[str, Any]) -> None:
        with self._lock:
            self._member_roles[tenant_id] = copy.deepcopy(permissions)

    def delete_member_role(self, tenant_id: str) -> None:
        with self._lock:
            self._member_roles.pop(tenant_id, None)

    # ── User overrides ──────────────────────────────────────────

    def get_user_override(self, principal_id: str, tenant_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            document = self._overrides.get((principal_id, tenant_id))
            return copy.deepcopy(document) if document is not None else None

    def save_user_override(self, principal_id: str, tenant_id: str, document: dict[str, Any]) -> None:
        with self._lock:
            self._overrides[(principal_id, tenant_id)] = copy.deepcopy(document)

    def clear_user_override(self, principal_id: str, tenant_id: str) -> None:
        with self._lock:
            self._overrides.pop((principal_id, tenant_id), None)

    # ── Resource listings ───────────────────────────────────────

    def list_resources(self, tenant_id: str, category: str) -> list[str]:
        with self._lock:
            return list(self._resources.get((tenant_id, category), {}))

    def add_resource(self, tenant_id: str, category: str, resource_id: str) -> None:
        with self._lock:
            self._resources.setdefault((tenant_id, category), {})[str(resource_id)] = None

    def remove_resource(self, tenant_id: str, category: str, resource_id: str) -> None:
        with self._lock:
            self._resources.get((tenant_id, category), {}).pop(str(resource_id), None)


__all__ = ["InMemoryPolicyStore"]
