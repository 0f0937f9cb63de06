"""Layered authorization for tenants, modules, actions and resources.

Defines:
- Action / PermissionValue / SystemRole / Modules / ResourceCategory: constants
- Principal, Role, resource policies, UserOverride: the policy data model
- SYSTEM_ROLES and system_role(): built-in role tables
- evaluate_resource_policy(): per-resource rules for one category
- CustomRoleResolver / UserOverrideResolver: store-backed lookups
- DecisionEngine: the authorize() entrypoint
- PolicyAdmin: authoring service for administrative tooling
"""

from .access import (
    accessible_modules,
    accessible_resources,
    can_access_module,
    can_manage_module,
    has_category_permission,
    has_form_permission,
    has_gallery_permission,
    has_inventory_permission,
    has_resource_permission,
)
from .admin import PolicyAdmin
from .catalog import (
    MEMBER_DENIED_MODULES,
    MEMBER_LIMITED_MODULES,
    MEMBER_READ_ONLY_MODULES,
    SYSTEM_ROLES,
    generate_full_permissions,
    generate_member_permissions,
    is_system_role,
    system_role,
)
from .constants import (
    ALL_ACTIONS,
    GLOBAL_ADMIN_ONLY_MODULES,
    Action,
    Modules,
    PermissionValue,
    ResourceCategory,
    SystemRole,
)
from .engine import Decision, DecisionEngine, DecisionLayer
from .models import (
    BlacklistAccess,
    FullAccess,
    InvalidAccess,
    Principal,
    ResourcePolicy,
    ResourceRef,
    Role,
    SpecificAccess,
    UserOverride,
    WhitelistAccess,
    parse_module_table,
    parse_resource_policy,
)
from .resolvers import CustomRoleResolver, UserOverrideResolver
from .resources import evaluate_resource_policy

__all__ = [
    "ALL_ACTIONS",
    "GLOBAL_ADMIN_ONLY_MODULES",
    "MEMBER_DENIED_MODULES",
    "MEMBER_LIMITED_MODULES",
    "MEMBER_READ_ONLY_MODULES",
    "SYSTEM_ROLES",
    "Action",
    "BlacklistAccess",
    "CustomRoleResolver",
    "Decision",
    "DecisionEngine",
    "DecisionLayer",
    "FullAccess",
    "InvalidAccess",
    "Modules",
    "PermissionValue",
    "PolicyAdmin",
    "Principal",
    "ResourceCategory",
    "ResourcePolicy",
    "ResourceRef",
    "Role",
    "SpecificAccess",
    "SystemRole",
    "UserOverride",
    "UserOverrideResolver",
    "WhitelistAccess",
    "accessible_modules",
    "accessible_resources",
    "can_access_module",
    "can_manage_module",
    "evaluate_resource_policy",
    "generate_full_permissions",
    "generate_member_permissions",
    "has_category_permission",
    "has_form_permission",
    "has_gallery_permission",
    "has_inventory_permission",
    "has_resource_permission",
    "is_system_role",
    "parse_module_table",
    "parse_resource_policy",
    "system_role",
]
