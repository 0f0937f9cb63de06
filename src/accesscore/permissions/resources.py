"""Resource policy evaluation.

Decides whether one concrete resource id is reachable under a role's
policy for its category. Called by the decision engine only after the
module-level grant has been confirmed.
"""

from __future__ import annotations

import logging
from typing import Any

from .constants import Action
from .models import BlacklistAccess, FullAccess, InvalidAccess, SpecificAccess, WhitelistAccess

logger = logging.getLogger(__name__)


def evaluate_resource_policy(policy: Any, resource_id: str, action: Action | str) -> bool:
    """Check ``resource_id`` against a category policy.

    Rules:
    1. No policy (``None``) or ``FullAccess`` → allowed
    2. ``WhitelistAccess`` → allowed only if the id is listed
    3. ``BlacklistAccess`` → allowed unless the id is listed
    4. ``SpecificAccess`` → allowed only if the id is listed AND its
       action flag is ``True``; an unlisted id or action is denied
    5. Anything else (``InvalidAccess``, unknown objects) → denied

    Args:
        policy: Parsed policy from ``Role.resource_policy(category)``.
        resource_id: Id of the targeted resource.
        action: Requested action.

    Returns:
        True if the resource is reachable for this action.

    Example::

        policy = WhitelistAccess(allowed_resources={"A", "B"})
        evaluate_resource_policy(policy, "A", Action.READ)  # True
        evaluate_resource_policy(policy, "C", Action.READ)  # False

        policy = SpecificAccess(specific={"A": {"read": True}})
        evaluate_resource_policy(policy, "A", Action.UPDATE)  # False
    """
    resource_id = str(resource_id)

    if policy is None or isinstance(policy, FullAccess):
        return True

    if isinstance(policy, WhitelistAccess):
        return resource_id in policy.allowed_resources

    if isinstance(policy, BlacklistAccess):
        return resource_id not in policy.denied_resources

    if isinstance(policy, SpecificAccess):
        per_action = policy.specific.get(resource_id)
        if per_action is None:
            return False
        action_key = action.value if isinstance(action, Action) else str(action)
        return per_action.get(action_key) is True

    if isinstance(policy, InvalidAccess):
        logger.warning("Denying resource '%s': invalid resource policy (%s)", resource_id, policy.reason)
    else:
        logger.warning("Denying resource '%s': unsupported policy type %s", resource_id, type(policy).__name__)
    return False


__all__ = ["evaluate_resource_policy"]
