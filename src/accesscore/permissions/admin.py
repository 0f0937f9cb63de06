"""Policy authoring service.

Write-side counterpart of the decision engine, used by administrative
tooling. Edits take effect on the next ``authorize()`` call; nothing here
is cached.

Unlike the engine, authoring operations raise
:class:`~accesscore.exceptions.PolicyConfigurationError` on invalid input
and let storage errors propagate.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..exceptions import PolicyConfigurationError
from ..logging import get_access_logger
from ..store.base import PolicyStore, RoleRecord
from .catalog import SYSTEM_ROLES, is_system_role
from .constants import Action, PermissionValue, SystemRole
from .models import (
    InvalidAccess,
    ModuleTable,
    Role,
    UserOverride,
    module_table_to_document,
    parse_module_table,
    parse_resource_policy,
    resource_policy_to_document,
)

ActionArg = Union[Action, str]


def _require_action(action: ActionArg) -> Action:
    parsed = Action.parse(action)
    if parsed is None:
        raise PolicyConfigurationError(f"Unknown action {action!r}", action=str(action))
    return parsed


def _require_policy(category: str, policy: Any) -> dict[str, Any]:
    parsed = parse_resource_policy(policy)
    if isinstance(parsed, InvalidAccess):
        raise PolicyConfigurationError(f"Invalid resource policy: {parsed.reason}", category=category)
    return resource_policy_to_document(parsed)


class PolicyAdmin:
    """Create and edit roles, member customizations, resource policies and overrides."""

    def __init__(self, store: PolicyStore) -> None:
        self._store = store

    # ── Custom roles ────────────────────────────────────────────

    def create_role(
        self,
        tenant_id: str,
        name: str,
        permissions: Optional[Mapping[str, Mapping[str, Any]]] = None,
        resource_permissions: Optional[Mapping[str, Any]] = None,
        description: str = "",
    ) -> str:
        """Persist a new custom role and return its record id.

        Raises:
            PolicyConfigurationError: empty or reserved name, a role with
                this name already exists in the tenant, or a resource policy
                does not parse.
        """
        name = (name or "").strip()
        if not tenant_id:
            raise PolicyConfigurationError("Tenant is required")
        if not name:
            raise PolicyConfigurationError("Role name is required")
        if is_system_role(name):
            raise PolicyConfigurationError(f"'{name}' is a system role name", role_name=name)
        if self._store.find_roles(tenant_id, name):
            raise PolicyConfigurationError(
                f"Role '{name}' already exists in tenant '{tenant_id}'", role_name=name, tenant_id=tenant_id
            )

        resources = {
            str(category): _require_policy(category, policy) for category, policy in (resource_permissions or {}).items()
        }
        role = Role.from_document(
            {
                "name": name,
                "description": description,
                "permissions": dict(permissions or {}),
                "resourcePermissions": resources,
            },
            tenant_id=tenant_id,
        )
        record_id = self._store.save_role(tenant_id, role.to_document())
        get_access_logger(__name__, tenant_id=tenant_id).info("Created role '%s' (%s)", name, record_id)
        return record_id

    def get_role(self, tenant_id: str, name: str) -> Role:
        """Effective role for authoring screens (system roles included)."""
        if is_system_role(name):
            if name == SystemRole.MEMBER:
                return Role(
                    name=name,
                    tenant_id=tenant_id,
                    is_system=True,
                    description=SYSTEM_ROLES[name].description,
                    module_permissions=self.member_permissions(tenant_id),
                )
            return SYSTEM_ROLES[name].model_copy(deep=True)
        record = self._find_one(tenant_id, name)
        return Role.from_document(record.document, tenant_id=tenant_id)

    def update_role_permission(
        self,
        tenant_id: str,
        name: str,
        module: str,
        action: ActionArg,
        value: Union[PermissionValue, bool, str, None],
    ) -> None:
        """Set one (module, action) cell of a role to a tri-state value.

        ``member`` edits are saved as the tenant's member customization.
        ``global_admin`` and ``admin`` are read-only.
        """
        parsed_action = _require_action(action)
        parsed_value = PermissionValue.parse(value)

        if name in (SystemRole.GLOBAL_ADMIN, SystemRole.ADMIN):
            raise PolicyConfigurationError(f"System role '{name}' is not editable", role_name=name)

        if name == SystemRole.MEMBER:
            table = self.member_permissions(tenant_id)
            table.setdefault(module, {})[parsed_action] = parsed_value
            self.save_member_permissions(tenant_id, table)
            return

        # Only the module table is rewritten; stored resource policies stay as authored.
        record = self._find_one(tenant_id, name)
        document = dict(record.document)
        table = parse_module_table(document.get("permissions"))
        table.setdefault(module, {})[parsed_action] = parsed_value
        document["permissions"] = module_table_to_document(table)
        self._store.save_role(tenant_id, document, record_id=record.record_id)

    def set_resource_policy(self, tenant_id: str, name: str, category: str, policy: Any) -> None:
        """Attach a resource policy for ``category`` to a custom role.

        ``policy`` may be a parsed policy model or a stored document. ``None``
        removes the category's policy (back to full access).
        """
        if is_system_role(name):
            raise PolicyConfigurationError(f"System role '{name}' has no resource policies", role_name=name)

        record = self._find_one(tenant_id, name)
        document = dict(record.document)
        resources = dict(document.get("resourcePermissions") or {})

        if policy is None:
            resources.pop(category, None)
        else:
            resources[category] = _require_policy(category, policy)

        document["resourcePermissions"] = resources
        self._store.save_role(tenant_id, document, record_id=record.record_id)

    def delete_role(self, tenant_id: str, name: str) -> int:
        """Delete every role named ``name`` in the tenant. Returns the count."""
        if is_system_role(name):
            raise PolicyConfigurationError(f"System role '{name}' cannot be deleted", role_name=name)
        records = self._store.find_roles(tenant_id, name)
        for record in records:
            self._store.delete_role(tenant_id, record.record_id)
        get_access_logger(__name__, tenant_id=tenant_id).info("Deleted %d role(s) named '%s'", len(records), name)
        return len(records)

    # ── Member customization ────────────────────────────────────

    def member_permissions(self, tenant_id: str) -> ModuleTable:
        """The member table in effect for the tenant (copy, safe to edit)."""
        stored = self._store.get_member_role(tenant_id)
        if stored is not None:
            return parse_module_table(stored)
        generated = SYSTEM_ROLES[SystemRole.MEMBER].module_permissions
        return {module: dict(cells) for module, cells in generated.items()}

    def save_member_permissions(self, tenant_id: str, permissions: Mapping[str, Mapping[Any, Any]]) -> None:
        """Replace the tenant's member table outright (no merge with defaults)."""
        table = parse_module_table(
            {module: {getattr(a, "value", a): v for a, v in cells.items()} for module, cells in permissions.items()}
        )
        self._store.save_member_role(tenant_id, module_table_to_document(table))
        get_access_logger(__name__, tenant_id=tenant_id).info("Saved member permissions (%d modules)", len(table))

    def reset_member_permissions(self, tenant_id: str) -> None:
        """Drop the customization; the generated member table applies again."""
        self._store.delete_member_role(tenant_id)

    # ── User overrides ──────────────────────────────────────────

    def get_user_override(self, principal_id: str, tenant_id: str) -> UserOverride:
        document = self._store.get_user_override(principal_id, tenant_id) or {}
        return UserOverride.from_document(document, principal_id=principal_id, tenant_id=tenant_id)

    def set_user_override(
        self,
        principal_id: str,
        tenant_id: str,
        category: str,
        resource_id: str,
        action: ActionArg,
        allowed: bool,
    ) -> None:
        """Set one (category, id, action) flag for a principal."""
        parsed_action = _require_action(action)
        override = self.get_user_override(principal_id, tenant_id)
        updated = override.with_flag(category, resource_id, parsed_action, allowed)
        self._store.save_user_override(principal_id, tenant_id, updated.to_document())

    def clear_user_override(
        self,
        principal_id: str,
        tenant_id: str,
        category: Optional[str] = None,
        resource_id: Optional[str] = None,
    ) -> None:
        """Clear a principal's overrides: all of them, one category or one resource."""
        if category is None:
            self._store.clear_user_override(principal_id, tenant_id)
            return

        override = self.get_user_override(principal_id, tenant_id)
        permissions = {c: {r: dict(a) for r, a in res.items()} for c, res in override.permissions.items()}
        if resource_id is None:
            permissions.pop(category, None)
        else:
            permissions.get(category, {}).pop(str(resource_id), None)
            if not permissions.get(category, True):
                permissions.pop(category, None)

        if not permissions:
            self._store.clear_user_override(principal_id, tenant_id)
            return
        updated = UserOverride(principal_id=principal_id, tenant_id=tenant_id, permissions=permissions)
        self._store.save_user_override(principal_id, tenant_id, updated.to_document())

    # ── Helpers ─────────────────────────────────────────────────

    def _find_one(self, tenant_id: str, name: str) -> RoleRecord:
        records = sorted(self._store.find_roles(tenant_id, name), key=lambda r: r.record_id)
        if not records:
            raise PolicyConfigurationError(
                f"Role '{name}' not found in tenant '{tenant_id}'", role_name=name, tenant_id=tenant_id
            )
        return records[0]


__all__ = ["PolicyAdmin"]
