"""Policy store adapters.

- ``PolicyStore``: abstract contract (roles, member customization,
  user overrides, resource listings).
- ``InMemoryPolicyStore``: thread-safe in-process store.
- ``RedisPolicyStore``: JSON documents in Redis.
- ``create_policy_store()``: build the store named by ``AccessConfig``.
"""

from __future__ import annotations

from typing import Optional

from ..config import AccessConfig, StoreBackend
from .base import PolicyStore, RoleRecord
from .memory import InMemoryPolicyStore


def create_policy_store(config: Optional[AccessConfig] = None) -> PolicyStore:
    """Build the policy store selected by ``config.store_backend``."""
    if config is None:
        from ..config import load_access_config_from_env

        config = load_access_config_from_env()

    if config.store_backend == StoreBackend.REDIS:
        from .redis_store import RedisPolicyStore

        return RedisPolicyStore.from_config(config)
    return InMemoryPolicyStore()


__all__ = [
    "InMemoryPolicyStore",
    "PolicyStore",
    "RoleRecord",
    "create_policy_store",
]
