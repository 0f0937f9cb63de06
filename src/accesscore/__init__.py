from .config import AccessConfig, LogLevel, StoreBackend, load_access_config_from_env
from .exceptions import (
    AccessCoreError,
    AmbiguousPolicyError,
    ConfigurationError,
    PolicyConfigurationError,
    StorageError,
    StoreUnavailable,
)
from .logging import (
    redact_secrets,
    safe_log_value,
    AccessLogFormatter,
    AccessLoggerAdapter,
    setup_logging,
    get_access_logger,
)
from .store import InMemoryPolicyStore, PolicyStore, RoleRecord, create_policy_store
from .permissions import (
    Action,
    BlacklistAccess,
    Decision,
    DecisionEngine,
    FullAccess,
    Modules,
    PermissionValue,
    PolicyAdmin,
    Principal,
    ResourceCategory,
    ResourceRef,
    Role,
    SpecificAccess,
    SystemRole,
    UserOverride,
    WhitelistAccess,
    accessible_modules,
    accessible_resources,
    can_access_module,
    can_manage_module,
    evaluate_resource_policy,
    has_category_permission,
    has_form_permission,
    has_gallery_permission,
    has_inventory_permission,
)

__all__ = [
    'AccessConfig',
    'LogLevel',
    'StoreBackend',
    'load_access_config_from_env',
    'AccessCoreError',
    'AmbiguousPolicyError',
    'ConfigurationError',
    'PolicyConfigurationError',
    'StorageError',
    'StoreUnavailable',
    'redact_secrets',
    'safe_log_value',
    'AccessLogFormatter',
    'AccessLoggerAdapter',
    'setup_logging',
    'get_access_logger',
    'InMemoryPolicyStore',
    'PolicyStore',
    'RoleRecord',
    'create_policy_store',
    'Action',
    'BlacklistAccess',
    'Decision',
    'DecisionEngine',
    'FullAccess',
    'Modules',
    'PermissionValue',
    'PolicyAdmin',
    'Principal',
    'ResourceCategory',
    'ResourceRef',
    'Role',
    'SpecificAccess',
    'SystemRole',
    'UserOverride',
    'WhitelistAccess',
    'accessible_modules',
    'accessible_resources',
    'can_access_module',
    'can_manage_module',
    'evaluate_resource_policy',
    'has_category_permission',
    'has_form_permission',
    'has_gallery_permission',
    'has_inventory_permission',
]
