"""Policy data model: principals, roles, resource policies and user overrides.

Stored documents are loosely shaped (authored by an admin UI, possibly
mid-edit). Everything here parses them tolerantly: a missing or malformed
field becomes UNSET / absent, never a grant and never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import Action, PermissionValue

logger = logging.getLogger(__name__)


# ── Principal ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Principal:
    """Authenticated actor, normalized once at the boundary.

    Attributes:
        principal_id: Stable user id from the identity provider.
        role: Primary role name (``global_admin``, ``admin``, ``member`` or custom).
            Empty when the user record carries none; such a principal resolves
            no role and is denied.
        custom_role: Optional tenant-defined role name; wins over ``role``.
        tenants: Tenant ids the principal belongs to. Empty = unknown membership.
    """

    principal_id: str
    role: str = ""
    custom_role: str | None = None
    tenants: tuple[str, ...] = ()

    @property
    def effective_role(self) -> str:
        """The single role name used for every authorization call."""
        return self.custom_role or self.role

    def member_of(self, tenant_id: str) -> bool:
        """Whether the principal may act inside ``tenant_id``.

        Unknown membership (empty ``tenants``) is left to the caller's
        identity layer and does not block.
        """
        if not tenant_id:
            return False
        if not self.tenants:
            return True
        return tenant_id in self.tenants

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Principal":
        """Build a Principal from a user document.

        Accepts the field spellings found in user records: ``uid``/``id``,
        ``customRole``/``custom_role``, ``churchId``/``tenantId``/``tenants``.
        """
        principal_id = doc.get("uid") or doc.get("id") or doc.get("principal_id") or ""
        custom_role = doc.get("customRole") or doc.get("custom_role") or None

        tenants: list[str] = []
        raw_tenants = doc.get("tenants")
        if isinstance(raw_tenants, (list, tuple, set, frozenset)):
            tenants.extend(str(t) for t in raw_tenants if t)
        for key in ("churchId", "tenantId", "tenant_id"):
            value = doc.get(key)
            if value and str(value) not in tenants:
                tenants.append(str(value))

        return cls(
            principal_id=str(principal_id),
            role=str(doc.get("role") or ""),
            custom_role=str(custom_role) if custom_role else None,
            tenants=tuple(tenants),
        )


class ResourceRef(NamedTuple):
    """Concrete resource an operation targets."""

    category: str
    resource_id: str


# ── Resource policies ────────────────────────────────────────────


def _as_id_set(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, (str, int)):
        return frozenset({str(value)})
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(v) for v in value if v is not None and v != "")
    raise ValueError(f"expected a list of resource ids, got {type(value).__name__}")


class FullAccess(BaseModel):
    """Every resource id in the category is reachable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_type: Literal["full"] = Field(default="full", alias="accessType")


class WhitelistAccess(BaseModel):
    """Only the listed ids are reachable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_type: Literal["whitelist"] = Field(default="whitelist", alias="accessType")
    allowed_resources: frozenset[str] = Field(default_factory=frozenset, alias="allowedResources")

    @field_validator("allowed_resources", mode="before")
    @classmethod
    def _coerce_ids(cls, v: Any) -> frozenset[str]:
        return _as_id_set(v)


class BlacklistAccess(BaseModel):
    """Every id except the listed ones is reachable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_type: Literal["blacklist"] = Field(default="blacklist", alias="accessType")
    denied_resources: frozenset[str] = Field(default_factory=frozenset, alias="deniedResources")

    @field_validator("denied_resources", mode="before")
    @classmethod
    def _coerce_ids(cls, v: Any) -> frozenset[str]:
        return _as_id_set(v)


class SpecificAccess(BaseModel):
    """Per-resource, per-action boolean grants. Unlisted ids are denied."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_type: Literal["specific"] = Field(default="specific", alias="accessType")
    specific: dict[str, dict[str, bool]] = Field(default_factory=dict)

    @field_validator("specific", mode="before")
    @classmethod
    def _keep_boolean_cells(cls, v: Any) -> dict[str, dict[str, bool]]:
        # Non-boolean cells are dropped: an absent action already means False.
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("specific must map resource ids to action tables")
        cleaned: dict[str, dict[str, bool]] = {}
        for resource_id, actions in v.items():
            if not isinstance(actions, dict):
                cleaned[str(resource_id)] = {}
                continue
            cleaned[str(resource_id)] = {
                str(action): flag for action, flag in actions.items() if isinstance(flag, bool)
            }
        return cleaned


class InvalidAccess(BaseModel):
    """A stored policy that could not be parsed. Evaluates to deny."""

    model_config = ConfigDict(frozen=True)

    access_type: Literal["invalid"] = "invalid"
    reason: str = ""


ResourcePolicy = Union[FullAccess, WhitelistAccess, BlacklistAccess, SpecificAccess, InvalidAccess]

_POLICY_TYPES: dict[str, type[BaseModel]] = {
    "full": FullAccess,
    "whitelist": WhitelistAccess,
    "blacklist": BlacklistAccess,
    "specific": SpecificAccess,
}


def parse_resource_policy(raw: Any) -> FullAccess | WhitelistAccess | BlacklistAccess | SpecificAccess | InvalidAccess:
    """Parse one stored resource policy document.

    A document without ``accessType`` is a Full policy (resource rules are an
    optional refinement of the module grant). Anything unparseable becomes
    :class:`InvalidAccess`, which denies.
    """
    if isinstance(raw, (FullAccess, WhitelistAccess, BlacklistAccess, SpecificAccess, InvalidAccess)):
        return raw
    if not isinstance(raw, dict):
        return InvalidAccess(reason=f"policy is a {type(raw).__name__}, not a mapping")

    access_type = raw.get("accessType", raw.get("access_type"))
    if access_type in (None, ""):
        return FullAccess()
    policy_cls = _POLICY_TYPES.get(access_type) if isinstance(access_type, str) else None
    if policy_cls is None:
        return InvalidAccess(reason=f"unknown access type {access_type!r}")

    data = {k: v for k, v in raw.items() if k != "access_type"}
    data["accessType"] = access_type
    try:
        return policy_cls.model_validate(data)
    except ValidationError as e:
        return InvalidAccess(reason=f"malformed {access_type} policy: {e.error_count()} error(s)")


def resource_policy_to_document(policy: Any) -> dict[str, Any]:
    """Serialize a policy into the stored document shape."""
    if isinstance(policy, WhitelistAccess):
        return {"accessType": "whitelist", "allowedResources": sorted(policy.allowed_resources)}
    if isinstance(policy, BlacklistAccess):
        return {"accessType": "blacklist", "deniedResources": sorted(policy.denied_resources)}
    if isinstance(policy, SpecificAccess):
        return {"accessType": "specific", "specific": {k: dict(v) for k, v in policy.specific.items()}}
    if isinstance(policy, FullAccess):
        return {"accessType": "full"}
    raise ValueError(f"cannot store policy of type {type(policy).__name__}")


# ── Role ─────────────────────────────────────────────────────────

ModuleTable = dict[str, dict[Action, PermissionValue]]


def parse_module_table(raw: Any) -> ModuleTable:
    """Parse a stored ``module -> action -> value`` table.

    Unknown actions and non-mapping module entries are skipped; every
    action missing from a module entry is UNSET.
    """
    if not isinstance(raw, dict):
        return {}

    table: ModuleTable = {}
    for module, actions in raw.items():
        if not isinstance(actions, dict):
            logger.warning("Skipping malformed permission entry for module '%s'", module)
            continue
        cells: dict[Action, PermissionValue] = {}
        for action_name, value in actions.items():
            action = Action.parse(action_name)
            if action is None:
                continue
            cells[action] = PermissionValue.parse(value)
        table[str(module)] = cells
    return table


def module_table_to_document(table: ModuleTable) -> dict[str, dict[str, Any]]:
    """Serialize a module table, omitting UNSET cells."""
    doc: dict[str, dict[str, Any]] = {}
    for module, cells in table.items():
        doc[module] = {
            action.value: value.to_stored() for action, value in cells.items() if value is not PermissionValue.UNSET
        }
    return doc


class Role(BaseModel):
    """A role's module table and resource policies.

    System roles have ``tenant_id=None`` and ``is_system=True``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    tenant_id: Optional[str] = None
    is_system: bool = False
    description: str = ""
    module_permissions: ModuleTable = Field(default_factory=dict)
    resource_permissions: dict[str, Any] = Field(default_factory=dict)

    def module_permission(self, module: str, action: Action) -> PermissionValue:
        """Cell value for (module, action); UNSET when either is missing."""
        return self.module_permissions.get(module, {}).get(action, PermissionValue.UNSET)

    def resource_policy(self, category: str):
        """Resource policy for ``category`` or None when none is authored."""
        return self.resource_permissions.get(category)

    @classmethod
    def from_document(cls, doc: dict[str, Any], *, tenant_id: str | None = None) -> "Role":
        """Build a custom role from a stored role document."""
        raw_resources = doc.get("resourcePermissions")
        resources: dict[str, Any] = {}
        if isinstance(raw_resources, dict):
            for category, raw_policy in raw_resources.items():
                policy = parse_resource_policy(raw_policy)
                if isinstance(policy, InvalidAccess):
                    logger.warning(
                        "Role '%s' has an invalid '%s' resource policy: %s",
                        doc.get("name"),
                        category,
                        policy.reason,
                    )
                resources[str(category)] = policy

        return cls(
            name=str(doc.get("name") or ""),
            tenant_id=tenant_id or doc.get("tenantId") or doc.get("churchId"),
            description=str(doc.get("description") or ""),
            module_permissions=parse_module_table(doc.get("permissions")),
            resource_permissions=resources,
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize into the stored role document shape."""
        return {
            "name": self.name,
            "tenantId": self.tenant_id,
            "description": self.description,
            "permissions": module_table_to_document(self.module_permissions),
            "resourcePermissions": {
                category: resource_policy_to_document(policy)
                for category, policy in self.resource_permissions.items()
                if not isinstance(policy, InvalidAccess)
            },
        }


# ── User override ────────────────────────────────────────────────


def _override_flag(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("deny", "denied"):
        return False
    return None


class UserOverride(BaseModel):
    """Per-principal, per-tenant resource exceptions.

    ``permissions`` maps category -> resource id -> action -> bool. A value
    present for a (category, id, action) triple is final.
    """

    model_config = ConfigDict(frozen=True)

    principal_id: str
    tenant_id: str
    permissions: dict[str, dict[str, dict[str, bool]]] = Field(default_factory=dict)

    @field_validator("permissions", mode="before")
    @classmethod
    def _normalize(cls, v: Any) -> dict[str, dict[str, dict[str, bool]]]:
        if not isinstance(v, dict):
            return {}
        normalized: dict[str, dict[str, dict[str, bool]]] = {}
        for category, resources in v.items():
            if not isinstance(resources, dict):
                continue
            per_resource: dict[str, dict[str, bool]] = {}
            for resource_id, actions in resources.items():
                if not isinstance(actions, dict):
                    continue
                cells = {}
                for action, raw in actions.items():
                    flag = _override_flag(raw)
                    if flag is not None:
                        cells[str(action)] = flag
                per_resource[str(resource_id)] = cells
            normalized[str(category)] = per_resource
        return normalized

    def lookup(self, category: str, resource_id: str, action: Action | str) -> bool | None:
        """Return the stored flag for the triple, or None when there is none."""
        action_key = action.value if isinstance(action, Action) else str(action)
        return self.permissions.get(category, {}).get(str(resource_id), {}).get(action_key)

    def with_flag(self, category: str, resource_id: str, action: Action | str, allowed: bool) -> "UserOverride":
        """Copy with one triple set."""
        action_key = action.value if isinstance(action, Action) else str(action)
        permissions = {c: {r: dict(a) for r, a in res.items()} for c, res in self.permissions.items()}
        permissions.setdefault(category, {}).setdefault(str(resource_id), {})[action_key] = bool(allowed)
        return UserOverride(principal_id=self.principal_id, tenant_id=self.tenant_id, permissions=permissions)

    @classmethod
    def from_document(cls, doc: dict[str, Any], *, principal_id: str, tenant_id: str) -> "UserOverride":
        return cls(principal_id=principal_id, tenant_id=tenant_id, permissions=doc.get("permissions"))

    def to_document(self) -> dict[str, Any]:
        return {
            "userId": self.principal_id,
            "tenantId": self.tenant_id,
            "permissions": self.permissions,
        }


__all__ = [
    "BlacklistAccess",
    "FullAccess",
    "InvalidAccess",
    "ModuleTable",
    "Principal",
    "ResourcePolicy",
    "ResourceRef",
    "Role",
    "SpecificAccess",
    "UserOverride",
    "WhitelistAccess",
    "module_table_to_document",
    "parse_module_table",
    "parse_resource_policy",
    "resource_policy_to_document",
]
