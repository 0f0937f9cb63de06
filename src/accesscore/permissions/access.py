"""Access-check helpers built on the decision engine.

Thin wrappers used by feature modules (forms, inventory, course
categories, galleries) and navigation menus. Every helper returns a plain
boolean or a filtered list; none of them reveals why access was denied.
"""

from __future__ import annotations

import logging
from typing import Iterable, Union

from ..exceptions import AccessCoreError
from .constants import Action, Modules, ResourceCategory
from .engine import DecisionEngine
from .models import Principal, ResourceRef

logger = logging.getLogger(__name__)

ActionArg = Union[Action, str]


def can_access_module(engine: DecisionEngine, principal: Principal, tenant_id: str, module: str) -> bool:
    """At least read permission on ``module``."""
    return engine.authorize(principal, tenant_id, module, Action.READ)


def can_manage_module(engine: DecisionEngine, principal: Principal, tenant_id: str, module: str) -> bool:
    """Create AND update AND delete permission on ``module``.

    ``manage`` is not consulted: actions are independent bits.
    """
    return all(
        engine.authorize(principal, tenant_id, module, action)
        for action in (Action.CREATE, Action.UPDATE, Action.DELETE)
    )


def accessible_modules(
    engine: DecisionEngine,
    principal: Principal,
    tenant_id: str,
    modules: Iterable[str] = Modules.ALL,
) -> list[str]:
    """Modules (in catalog order) the principal can read.

    Example::

        accessible_modules(engine, member, "church-1", ["courses", "finances"])
        # ["courses"]
    """
    return [module for module in modules if can_access_module(engine, principal, tenant_id, module)]


def has_resource_permission(
    engine: DecisionEngine,
    principal: Principal,
    tenant_id: str,
    category: str,
    resource_id: str,
    action: ActionArg = Action.READ,
) -> bool:
    """Check one resource, guarded by the module its category belongs to.

    Unknown categories are denied: there is no module to check them against.
    """
    module = ResourceCategory.MODULES.get(category)
    if module is None:
        logger.warning("No module registered for resource category '%s'", category)
        return False
    return engine.authorize(principal, tenant_id, module, action, ResourceRef(category, str(resource_id)))


def has_form_permission(
    engine: DecisionEngine, principal: Principal, tenant_id: str, form_id: str, action: ActionArg = Action.READ
) -> bool:
    return has_resource_permission(engine, principal, tenant_id, ResourceCategory.FORM, form_id, action)


def has_inventory_permission(
    engine: DecisionEngine, principal: Principal, tenant_id: str, item_id: str, action: ActionArg = Action.READ
) -> bool:
    return has_resource_permission(engine, principal, tenant_id, ResourceCategory.INVENTORY, item_id, action)


def has_category_permission(
    engine: DecisionEngine, principal: Principal, tenant_id: str, category_id: str, action: ActionArg = Action.READ
) -> bool:
    return has_resource_permission(engine, principal, tenant_id, ResourceCategory.CATEGORY, category_id, action)


def has_gallery_permission(
    engine: DecisionEngine, principal: Principal, tenant_id: str, gallery_id: str, action: ActionArg = Action.READ
) -> bool:
    return has_resource_permission(engine, principal, tenant_id, ResourceCategory.GALLERY, gallery_id, action)


def accessible_resources(
    engine: DecisionEngine,
    principal: Principal,
    tenant_id: str,
    category: str,
    action: ActionArg = Action.READ,
) -> list[str]:
    """Ids from the category's resource listing the principal may act on.

    Returns an empty list when the listing cannot be read.
    """
    try:
        resource_ids = engine.store.list_resources(tenant_id, category)
    except AccessCoreError as e:
        logger.error("Could not list %s resources for tenant '%s': [%s] %s", category, tenant_id, e.code, e.message)
        return []

    return [
        resource_id
        for resource_id in resource_ids
        if has_resource_permission(engine, principal, tenant_id, category, resource_id, action)
    ]


__all__ = [
    "accessible_modules",
    "accessible_resources",
    "can_access_module",
    "can_manage_module",
    "has_category_permission",
    "has_form_permission",
    "has_gallery_permission",
    "has_inventory_permission",
    "has_resource_permission",
]
