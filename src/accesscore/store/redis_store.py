"""Redis-backed policy store.

Key layout (``{prefix}`` defaults to ``accesscore:policy``):

    {prefix}:{tenant}:roles                     hash   record_id -> role JSON
    {prefix}:{tenant}:roles:seq                 string role id counter
    {prefix}:{tenant}:member_role               string member table JSON
    {prefix}:{tenant}:overrides:{principal}     string override JSON
    {prefix}:{tenant}:resources:{category}      sorted set of resource ids

Reads use the configured socket timeout. Timeouts and connection failures
are re-raised as :class:`StoreUnavailable`; the engine turns them into a deny.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Callable, Optional, TypeVar, cast

import redis

from ..config import AccessConfig
from ..exceptions import ConfigurationError, StorageError, StoreUnavailable
from .base import PolicyStore, RoleRecord

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "accesscore:policy"

_F = TypeVar("_F", bound=Callable[..., Any])


def _translate_redis_errors(method: _F) -> _F:
    """Map redis exceptions onto the accesscore storage errors."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            logger.error("Policy store unavailable during %s: %s", method.__name__, e)
            raise StoreUnavailable(f"Redis unavailable: {e}", operation=method.__name__) from e
        except redis.exceptions.RedisError as e:
            logger.error("Policy store error during %s: %s", method.__name__, e)
            raise StorageError(f"Redis error: {e}", operation=method.__name__) from e

    return cast(_F, wrapper)


def _loads(raw: Any, what: str) -> Optional[dict[str, Any]]:
    if raw is None:
        return None
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Corrupt {what} document: {e}", what=what) from e
    if not isinstance(document, dict):
        raise StorageError(f"Corrupt {what} document: expected an object", what=what)
    return document


class RedisPolicyStore(PolicyStore):
    """:class:`PolicyStore` on top of a synchronous redis client.

    Args:
        client: A ``redis.Redis`` instance created with ``decode_responses=True``.
        prefix: Key prefix for every policy key.
    """

    def __init__(self, client: "redis.Redis", prefix: str = DEFAULT_PREFIX) -> None:
        self._client = client
        self._prefix = prefix.rstrip(":")

    @classmethod
    def from_config(cls, config: AccessConfig) -> "RedisPolicyStore":
        if not config.redis_url:
            raise ConfigurationError("REDIS_URL is required for the redis policy store")
        client = redis.Redis.from_url(
            config.redis_url,
            decode_responses=True,
            socket_timeout=config.store_timeout_seconds,
            socket_connect_timeout=config.store_timeout_seconds,
        )
        return cls(client, prefix=config.redis_key_prefix)

    def _key(self, tenant_id: str, *parts: str) -> str:
        return ":".join((self._prefix, tenant_id, *parts))

    # ── Roles ───────────────────────────────────────────────────

    def find_roles(self, tenant_id: str, name: str) -> list[RoleRecord]:
        return [record for record in self.list_roles(tenant_id) if record.name == name]

    @_translate_redis_errors
    def list_roles(self, tenant_id: str) -> list[RoleRecord]:
        raw_roles = self._client.hgetall(self._key(tenant_id, "roles")) or {}
        records = []
        for record_id, raw in sorted(raw_roles.items()):
            try:
                document = _loads(raw, "role")
            except StorageError as e:
                logger.warning("Skipping role %s in tenant %s: %s", record_id, tenant_id, e.message)
                continue
            records.append(RoleRecord(record_id=record_id, document=document or {}))
        return records

    @_translate_redis_errors
    def save_role(self, tenant_id: str, document: dict[str, Any], record_id: Optional[str] = None) -> str:
        if record_id is None:
            record_id = f"{int(self._client.incr(self._key(tenant_id, 'roles', 'seq'))):010d}"
        self._client.hset(self._key(tenant_id, "roles"), record_id, json.dumps(document))
        return record_id

    @_translate_redis_errors
    def delete_role(self, tenant_id: str, record_id: str) -> None:
        self._client.hdel(self._key(tenant_id, "roles"), record_id)

    # ── Member customization ────────────────────────────────────

    @_translate_redis_errors
    def get_member_role(self, tenant_id: str) -> Optional[dict[str, Any]]:
        return _loads(self._client.get(self._key(tenant_id, "member_role")), "member role")

    @_translate_redis_errors
    def save_member_role(self, tenant_id: str, permissions: dict[str, Any]) -> None:
        self._client.set(self._key(tenant_id, "member_role"), json.dumps(permissions))

    @_translate_redis_errors
    def delete_member_role(self, tenant_id: str) -> None:
        self._client.delete(self._key(tenant_id, "member_role"))

    # ── User overrides ──────────────────────────────────────────

    @_translate_redis_errors
    def get_user_override(self, principal_id: str, tenant_id: str) -> Optional[dict[str, Any]]:
        return _loads(self._client.get(self._key(tenant_id, "overrides", principal_id)), "user override")

    @_translate_redis_errors
    def save_user_override(self, principal_id: str, tenant_id: str, document: dict[str, Any]) -> None:
        self._client.set(self._key(tenant_id, "overrides", principal_id), json.dumps(document))

    @_translate_redis_errors
    def clear_user_override(self, principal_id: str, tenant_id: str) -> None:
        self._client.delete(self._key(tenant_id, "overrides", principal_id))

    # ── Resource listings ───────────────────────────────────────

    @_translate_redis_errors
    def list_resources(self, tenant_id: str, category: str) -> list[str]:
        return list(self._client.zrange(self._key(tenant_id, "resources", category), 0, -1))

    @_translate_redis_errors
    def add_resource(self, tenant_id: str, category: str, resource_id: str) -> None:
        key = self._key(tenant_id, "resources", category)
        # Score by insertion order so listings are stable.
        self._client.zadd(key, {str(resource_id): self._client.zcard(key)}, nx=True)

    @_translate_redis_errors
    def remove_resource(self, tenant_id: str, category: str, resource_id: str) -> None:
        self._client.zrem(self._key(tenant_id, "resources", category), str(resource_id))


__all__ = ["DEFAULT_PREFIX", "RedisPolicyStore"]
