"""Unified exception hierarchy for accesscore.

All errors inherit from AccessCoreError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes (audit logs, admin APIs)

None of these errors ever escape ``DecisionEngine.authorize()``; the engine
converts every one of them into a deny. They are raised by the store adapters
and the authoring service, and surface to administrative callers only.

Usage:
    from accesscore.exceptions import (
        AccessCoreError,
        PolicyConfigurationError,
        StoreUnavailable,
    )
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessCoreError",
    "ConfigurationError",
    "PolicyConfigurationError",
    "AmbiguousPolicyError",
    "StorageError",
    "StoreUnavailable",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessCoreError(Exception):
    """Base exception for accesscore.

    Attributes:
        code: Stable error code string (e.g. "STORE_UNAVAILABLE").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessCoreError):
    """Invalid or missing library configuration."""

    code: str = "CONFIGURATION_ERROR"


class PolicyConfigurationError(ConfigurationError):
    """Role not found, malformed permission table or invalid authoring request."""

    code: str = "POLICY_CONFIGURATION_ERROR"


class AmbiguousPolicyError(PolicyConfigurationError):
    """More than one role with the same name inside a tenant."""

    code: str = "AMBIGUOUS_POLICY"


class StorageError(AccessCoreError):
    """Policy store operation failed."""

    code: str = "STORAGE_ERROR"


class StoreUnavailable(StorageError):
    """Policy store timed out or could not be reached."""

    code: str = "STORE_UNAVAILABLE"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[AccessCoreError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessCoreError]] = {}

    def register(self, code: str, error_cls: type[AccessCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("INVENTORY_LOCKED")
        class InventoryLockedError(AccessCoreError):
            code = "INVENTORY_LOCKED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessCoreError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("POLICY_CONFIGURATION_ERROR", PolicyConfigurationError)
error_registry.register("AMBIGUOUS_POLICY", AmbiguousPolicyError)
error_registry.register("STORAGE_ERROR", StorageError)
error_registry.register("STORE_UNAVAILABLE", StoreUnavailable)
