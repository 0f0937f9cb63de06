"""Store-backed resolvers for custom roles and user overrides.

Both resolvers only read. Storage errors propagate to the caller (the
decision engine), which denies on any of them.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..exceptions import AmbiguousPolicyError
from ..store.base import PolicyStore
from .constants import Action
from .models import ResourceRef, Role, UserOverride

logger = logging.getLogger(__name__)


class CustomRoleResolver:
    """Exact-match, tenant-scoped lookup of tenant-defined roles."""

    def __init__(self, store: PolicyStore) -> None:
        self._store = store

    def resolve(self, tenant_id: str, role_name: str) -> Optional[Role]:
        """Return the role named ``role_name`` in ``tenant_id``, or None.

        Duplicate names inside one tenant are a data integrity problem
        upstream. The record with the lowest id wins and a warning is
        logged; resolution never raises for it.
        """
        if not tenant_id or not role_name:
            return None

        # Filter again: a store must never leak another tenant's or name's rows.
        records = [
            r
            for r in self._store.find_roles(tenant_id, role_name)
            if r.name == role_name and r.document.get("tenantId") in (None, tenant_id)
        ]
        if not records:
            return None

        records.sort(key=lambda r: r.record_id)
        if len(records) > 1:
            error = AmbiguousPolicyError(
                f"{len(records)} roles named '{role_name}' in tenant '{tenant_id}'",
                tenant_id=tenant_id,
                role_name=role_name,
                record_ids=[r.record_id for r in records],
            )
            logger.warning(
                "[%s] %s; using record %s",
                error.code,
                error.message,
                records[0].record_id,
                extra={"tenant_id": tenant_id},
            )

        return Role.from_document(records[0].document, tenant_id=tenant_id)


class UserOverrideResolver:
    """Looks up per-principal resource exceptions."""

    def __init__(self, store: PolicyStore) -> None:
        self._store = store

    def load(self, principal_id: str, tenant_id: str) -> Optional[UserOverride]:
        document = self._store.get_user_override(principal_id, tenant_id)
        if document is None:
            return None
        return UserOverride.from_document(document, principal_id=principal_id, tenant_id=tenant_id)

    def lookup(self, principal_id: str, tenant_id: str, resource: ResourceRef, action: Action) -> Optional[bool]:
        """Return the override flag for the triple, or None to keep resolving."""
        override = self.load(principal_id, tenant_id)
        if override is None:
            return None
        return override.lookup(resource.category, resource.resource_id, action)


__all__ = ["CustomRoleResolver", "UserOverrideResolver"]
