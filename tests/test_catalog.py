"""Tests for the system role catalog."""

from __future__ import annotations

import pytest

from accesscore.permissions import (
    ALL_ACTIONS,
    MEMBER_DENIED_MODULES,
    MEMBER_LIMITED_MODULES,
    MEMBER_READ_ONLY_MODULES,
    SYSTEM_ROLES,
    Action,
    Modules,
    PermissionValue,
    SystemRole,
    generate_member_permissions,
    is_system_role,
    system_role,
)


class TestModules:
    def test_catalog_is_unique(self) -> None:
        assert len(Modules.ALL) == len(set(Modules.ALL))

    def test_resource_modules_in_catalog(self) -> None:
        for module in ("forms", "inventory", "coursecategories", "gallery", "userassignment"):
            assert module in Modules.ALL


class TestAdminRoles:
    @pytest.mark.parametrize("name", [SystemRole.GLOBAL_ADMIN, SystemRole.ADMIN])
    def test_every_cell_granted(self, name: str) -> None:
        role = SYSTEM_ROLES[name]
        assert role.is_system
        for module in Modules.ALL:
            for action in ALL_ACTIONS:
                assert role.module_permission(module, action) is PermissionValue.GRANTED


class TestMemberRole:
    @pytest.fixture
    def table(self):
        return generate_member_permissions()

    def test_read_only_modules(self, table) -> None:
        for module in MEMBER_READ_ONLY_MODULES:
            assert table[module][Action.READ] is PermissionValue.GRANTED
            for action in (Action.CREATE, Action.UPDATE, Action.DELETE, Action.MANAGE, Action.EXPORT):
                assert table[module][action] is PermissionValue.DENIED, (module, action)

    def test_limited_modules(self, table) -> None:
        for module in MEMBER_LIMITED_MODULES:
            for action in (Action.CREATE, Action.READ, Action.UPDATE):
                assert table[module][action] is PermissionValue.GRANTED
            assert table[module][Action.DELETE] is PermissionValue.DENIED

    def test_denied_modules(self, table) -> None:
        for module in MEMBER_DENIED_MODULES:
            assert all(table[module][a] is PermissionValue.DENIED for a in ALL_ACTIONS), module

    def test_unlisted_modules_are_unset(self, table) -> None:
        unlisted = set(Modules.ALL) - MEMBER_DENIED_MODULES - MEMBER_LIMITED_MODULES - MEMBER_READ_ONLY_MODULES
        assert unlisted, "catalog should contain modules outside the member partition"
        for module in unlisted:
            assert all(table[module][a] is PermissionValue.UNSET for a in ALL_ACTIONS), module

    def test_own_profile_is_editable(self, table) -> None:
        assert table["miperfil"][Action.UPDATE] is PermissionValue.GRANTED

    def test_partition_is_disjoint(self) -> None:
        assert not MEMBER_DENIED_MODULES & MEMBER_LIMITED_MODULES
        assert not MEMBER_DENIED_MODULES & MEMBER_READ_ONLY_MODULES
        assert not MEMBER_LIMITED_MODULES & MEMBER_READ_ONLY_MODULES


class TestSystemRoleLookup:
    def test_is_system_role(self) -> None:
        assert is_system_role("member")
        assert not is_system_role("treasurer")

    def test_member_override_replaces_table(self) -> None:
        custom = {"forms": {Action.READ: PermissionValue.GRANTED}}
        role = system_role(SystemRole.MEMBER, custom, tenant_id="t")
        assert role.tenant_id == "t"
        assert role.module_permission("forms", Action.READ) is PermissionValue.GRANTED
        # Not merged: generated grants are gone
        assert role.module_permission("courses", Action.READ) is PermissionValue.UNSET

    def test_override_ignored_for_admin_roles(self) -> None:
        role = system_role(SystemRole.ADMIN, {})
        assert role is SYSTEM_ROLES[SystemRole.ADMIN]

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(KeyError):
            system_role("treasurer")
