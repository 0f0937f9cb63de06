"""System role catalog: built-in role tables generated from static rules.

Provides:
- ``MEMBER_READ_ONLY_MODULES`` / ``MEMBER_LIMITED_MODULES`` / ``MEMBER_DENIED_MODULES``:
  the partition that shapes the member table.
- ``generate_full_permissions()``: every module, every action granted.
- ``generate_member_permissions()``: the default member table.
- ``SYSTEM_ROLES``: the three roles, generated once at import.
- ``system_role()``: look up a system role, applying a tenant's member
  customization when one is given.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .constants import ALL_ACTIONS, Action, Modules, PermissionValue, SystemRole
from .models import ModuleTable, Role

# ── Member partition ────────────────────────────────────────────

MEMBER_READ_ONLY_MODULES: frozenset[str] = frozenset(
    {
        "courses",
        "allevents",
        "events",
        "members",
        "chat",
        "directory",
        "info",
        "articles",
        "bible",
        "contact",
        "gallery",
        "media",
        "video",
        "audio",
        "pdf",
        "groups",
        "search",
        "sobre",
        "family",
        "churchapp",
    }
)

# Own-profile modules live here, not in the read-only set: members edit them.
MEMBER_LIMITED_MODULES: frozenset[str] = frozenset(
    {
        "eventregistration",
        "membermessaging",
        "userresponselog",
        "usercourseprogresss",
        "miperfil",
        "profile",
        "timetracker",
    }
)

MEMBER_DENIED_MODULES: frozenset[str] = frozenset(
    {
        "admin",
        "rolemanager",
        "userassignment",
        "miorganizacion",
        "courseadmin",
        "mediaadmin",
        "galleryadmin",
        "galleryupload",
        "balance",
        "finances",
        "invoices",
        "messagebalance",
        "businessintelligence",
        "userdashboard",
        "assistentepastoral",
        "leadershipdevelopment",
        "leadershiprecommendations",
        "adminconnect",
        "connectioncenter",
        "visitormessages",
        "visitordetails",
        "managegroups",
        "createteam",
        "teamdetail",
        "maintenance",
        "inventory",
        "inventorydetail",
        "rooms",
        "roomreservations",
        "broadcast",
        "broadcastview",
        "socialmedia",
        "socialmediaaccounts",
        "buildmychurch",
        "leica",
        "process",
        "forms",
    }
)

LIMITED_ACTIONS: frozenset[Action] = frozenset({Action.CREATE, Action.READ, Action.UPDATE})


def _row(granted: Iterable[Action], otherwise: PermissionValue) -> dict[Action, PermissionValue]:
    granted = frozenset(granted)
    return {action: PermissionValue.GRANTED if action in granted else otherwise for action in ALL_ACTIONS}


def generate_full_permissions(modules: Iterable[str] = Modules.ALL) -> ModuleTable:
    """Every module, every action GRANTED."""
    return {module: _row(ALL_ACTIONS, PermissionValue.UNSET) for module in modules}


def generate_member_permissions(modules: Iterable[str] = Modules.ALL) -> ModuleTable:
    """Default member table.

    - read-only modules: read GRANTED, everything else DENIED
    - limited modules: create/read/update GRANTED, everything else DENIED
    - denied modules: every action DENIED
    - anything else: every action UNSET

    Denied entries are explicit so members never fall through to a looser
    default; unlisted modules stay UNSET so audits can tell the difference.
    """
    table: ModuleTable = {}
    for module in dict.fromkeys([*modules, *MEMBER_DENIED_MODULES, *MEMBER_READ_ONLY_MODULES, *MEMBER_LIMITED_MODULES]):
        if module in MEMBER_DENIED_MODULES:
            table[module] = _row((), PermissionValue.DENIED)
        elif module in MEMBER_LIMITED_MODULES:
            table[module] = _row(LIMITED_ACTIONS, PermissionValue.DENIED)
        elif module in MEMBER_READ_ONLY_MODULES:
            table[module] = _row((Action.READ,), PermissionValue.DENIED)
        else:
            table[module] = _row((), PermissionValue.UNSET)
    return table


# ── System roles ────────────────────────────────────────────────

SYSTEM_ROLES: dict[str, Role] = {
    SystemRole.GLOBAL_ADMIN: Role(
        name=SystemRole.GLOBAL_ADMIN,
        is_system=True,
        description="Full system access across all tenants",
        module_permissions=generate_full_permissions(),
    ),
    # Global-admin-only modules are blocked by the engine, not by this table.
    SystemRole.ADMIN: Role(
        name=SystemRole.ADMIN,
        is_system=True,
        description="Full access to tenant management functions",
        module_permissions=generate_full_permissions(),
    ),
    SystemRole.MEMBER: Role(
        name=SystemRole.MEMBER,
        is_system=True,
        description="Basic member access to tenant content - customizable",
        module_permissions=generate_member_permissions(),
    ),
}


def is_system_role(name: str) -> bool:
    return name in SystemRole.ALL


def system_role(name: str, member_override: Optional[ModuleTable] = None, *, tenant_id: str | None = None) -> Role:
    """Return the system role ``name``.

    Args:
        name: One of :class:`SystemRole` names.
        member_override: A tenant's persisted member table. Only honored for
            ``member``; when given it replaces the generated table outright.
        tenant_id: Tenant the customization belongs to (recorded on the role).

    Raises:
        KeyError: ``name`` is not a system role.
    """
    role = SYSTEM_ROLES[name]
    if name != SystemRole.MEMBER or member_override is None:
        return role
    return Role(
        name=role.name,
        tenant_id=tenant_id,
        is_system=True,
        description=role.description,
        module_permissions=member_override,
    )


__all__ = [
    "LIMITED_ACTIONS",
    "MEMBER_DENIED_MODULES",
    "MEMBER_LIMITED_MODULES",
    "MEMBER_READ_ONLY_MODULES",
    "SYSTEM_ROLES",
    "generate_full_permissions",
    "generate_member_permissions",
    "is_system_role",
    "system_role",
]
