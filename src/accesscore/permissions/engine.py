"""Decision engine: the single authorization entrypoint.

Provides:
- ``Decision``: result of one authorization check (allowed + deciding layer).
- ``DecisionEngine``: resolves (principal, tenant, module, action, resource?)
  through the override, role, module and resource layers.

Fail-closed: every error inside a check resolves to a deny. ``authorize()``
never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..config import AccessConfig
from ..exceptions import AccessCoreError, PolicyConfigurationError
from ..logging import get_access_logger
from ..store.base import PolicyStore
from .catalog import is_system_role, system_role
from .constants import GLOBAL_ADMIN_ONLY_MODULES, Action, PermissionValue, SystemRole
from .models import Principal, ResourceRef, Role, parse_module_table
from .resolvers import CustomRoleResolver, UserOverrideResolver
from .resources import evaluate_resource_policy

logger = logging.getLogger(__name__)

ResourceArg = Union[ResourceRef, tuple, None]


class DecisionLayer:
    """Which step of the resolution chain produced a decision."""

    INVALID = "invalid"  # Malformed request
    TENANT = "tenant"  # Principal is not a member of the tenant
    ROOT = "root"  # global_admin / admin shortcut
    OVERRIDE = "override"  # User-specific override
    ROLE_MISSING = "role_missing"  # Custom role not found
    MODULE = "module"  # Module permission table
    RESOURCE = "resource"  # Resource policy
    ERROR = "error"  # Store or internal failure


@dataclass(frozen=True)
class Decision:
    """Result of one authorization check.

    ``reason`` is for audit logs only; callers must surface a generic
    "not permitted" outcome and never echo it to end users.
    """

    allowed: bool
    layer: str
    reason: str = ""

    @property
    def denied(self) -> bool:
        return not self.allowed


def _deny(layer: str, reason: str) -> Decision:
    return Decision(allowed=False, layer=layer, reason=reason)


def _allow(layer: str, reason: str) -> Decision:
    return Decision(allowed=True, layer=layer, reason=reason)


def _coerce_resource(resource: ResourceArg) -> Optional[ResourceRef]:
    if resource is None:
        return None
    if isinstance(resource, ResourceRef):
        ref = resource
    else:
        category, resource_id = resource
        ref = ResourceRef(category=category, resource_id=resource_id)
    if not ref.category or ref.resource_id in (None, ""):
        raise ValueError("resource reference needs both a category and an id")
    return ResourceRef(category=str(ref.category), resource_id=str(ref.resource_id))


class DecisionEngine:
    """Layered authorization resolution.

    Resolution order (first definitive answer wins):

    1. Root shortcut: ``global_admin`` → allow; ``admin`` → allow unless the
       module is global-admin-only.
    2. User override for the exact (category, id, action) triple.
    3. Role resolution: system catalog (member customization applied per
       tenant) or tenant-scoped custom role. Missing role → deny.
    4. Module table: DENIED or UNSET → deny.
    5. Resource policy for the category (absent policy = full access).

    Args:
        store: Policy store to read roles and overrides from.
        config: Optional AccessConfig; supplies the global-admin-only set.
        global_admin_only_modules: Explicit set, wins over ``config``.

    Example::

        engine = DecisionEngine(InMemoryPolicyStore())
        alice = Principal("u-1", role="member", tenants=("church-1",))
        engine.authorize(alice, "church-1", "courses", "read")    # True
        engine.authorize(alice, "church-1", "courses", "delete")  # False
    """

    def __init__(
        self,
        store: PolicyStore,
        config: Optional[AccessConfig] = None,
        *,
        global_admin_only_modules: Optional[Iterable[str]] = None,
    ) -> None:
        self._store = store
        self._roles = CustomRoleResolver(store)
        self._overrides = UserOverrideResolver(store)
        if global_admin_only_modules is not None:
            self._global_only = frozenset(global_admin_only_modules)
        elif config is not None:
            self._global_only = frozenset(config.global_admin_only_modules)
        else:
            self._global_only = GLOBAL_ADMIN_ONLY_MODULES

    @property
    def store(self) -> PolicyStore:
        return self._store

    @property
    def global_admin_only_modules(self) -> frozenset[str]:
        return self._global_only

    # ── Public API ──────────────────────────────────────────────

    def authorize(
        self,
        principal: Optional[Principal],
        tenant_id: str,
        module: str,
        action: Union[Action, str],
        resource: ResourceArg = None,
    ) -> bool:
        """Return True only if the operation is permitted."""
        return self.decide(principal, tenant_id, module, action, resource).allowed

    def decide(
        self,
        principal: Optional[Principal],
        tenant_id: str,
        module: str,
        action: Union[Action, str],
        resource: ResourceArg = None,
    ) -> Decision:
        """Resolve a check and report which layer decided it."""
        principal_id = getattr(principal, "principal_id", None)
        log = get_access_logger(__name__, tenant_id=tenant_id or None, principal_id=principal_id)

        try:
            decision = self._decide(principal, tenant_id, module, action, resource, log)
        except PolicyConfigurationError as e:
            log.warning("Policy configuration error, denying: [%s] %s", e.code, e.message)
            decision = _deny(DecisionLayer.ERROR, e.code)
        except AccessCoreError as e:
            log.error("Authorization check failed, denying: [%s] %s", e.code, e.message)
            decision = _deny(DecisionLayer.ERROR, e.code)
        except Exception as e:
            log.exception("Unexpected error during authorization, denying: %s", e)
            decision = _deny(DecisionLayer.ERROR, type(e).__name__)

        log.debug(
            "%s %s:%s%s -> %s (%s)",
            getattr(principal, "effective_role", None),
            module,
            getattr(action, "value", action),
            f" on {resource!r}" if resource is not None else "",
            "allow" if decision.allowed else "deny",
            decision.layer,
        )
        return decision

    def resolve_role(self, tenant_id: str, role_name: str) -> Optional[Role]:
        """Resolve a role name to its effective table inside ``tenant_id``."""
        if is_system_role(role_name):
            if role_name != SystemRole.MEMBER:
                return system_role(role_name)
            customization = self._store.get_member_role(tenant_id)
            if customization is None:
                return system_role(role_name)
            return system_role(role_name, parse_module_table(customization), tenant_id=tenant_id)
        return self._roles.resolve(tenant_id, role_name)

    # ── Resolution chain ────────────────────────────────────────

    def _decide(
        self,
        principal: Optional[Principal],
        tenant_id: str,
        module: str,
        action: Union[Action, str],
        resource: ResourceArg,
        log: logging.LoggerAdapter,
    ) -> Decision:
        if principal is None:
            return _deny(DecisionLayer.INVALID, "no principal")
        if not tenant_id:
            return _deny(DecisionLayer.INVALID, "no tenant")
        if not module:
            return _deny(DecisionLayer.INVALID, "no module")
        parsed_action = Action.parse(action)
        if parsed_action is None:
            return _deny(DecisionLayer.INVALID, f"unknown action {action!r}")
        try:
            ref = _coerce_resource(resource)
        except (TypeError, ValueError):
            return _deny(DecisionLayer.INVALID, "malformed resource reference")

        role_name = principal.effective_role

        if role_name != SystemRole.GLOBAL_ADMIN and not principal.member_of(tenant_id):
            return _deny(DecisionLayer.TENANT, "principal is not a member of the tenant")

        # 1. Root shortcut
        if role_name == SystemRole.GLOBAL_ADMIN:
            return _allow(DecisionLayer.ROOT, "global_admin")
        if role_name == SystemRole.ADMIN:
            if module in self._global_only:
                return _deny(DecisionLayer.ROOT, "module reserved for global admins")
            return _allow(DecisionLayer.ROOT, "admin")

        # 2. User override
        if ref is not None:
            flag = self._overrides.lookup(principal.principal_id, tenant_id, ref, parsed_action)
            if flag is not None:
                return Decision(allowed=flag, layer=DecisionLayer.OVERRIDE, reason="user override")

        # 3. Role resolution
        role = self.resolve_role(tenant_id, role_name)
        if role is None:
            log.warning("Role '%s' not found for tenant '%s'", role_name, tenant_id)
            return _deny(DecisionLayer.ROLE_MISSING, f"role {role_name!r} not found")

        # 4. Module permission
        value = role.module_permission(module, parsed_action)
        if value is PermissionValue.DENIED:
            return _deny(DecisionLayer.MODULE, "explicitly denied")
        if value is not PermissionValue.GRANTED:
            return _deny(DecisionLayer.MODULE, "not granted")

        # 5. Resource policy
        if ref is None:
            return _allow(DecisionLayer.MODULE, "granted")
        allowed = evaluate_resource_policy(role.resource_policy(ref.category), ref.resource_id, parsed_action)
        return Decision(allowed=allowed, layer=DecisionLayer.RESOURCE, reason=f"{ref.category} policy")


__all__ = ["Decision", "DecisionEngine", "DecisionLayer"]
