"""Tests for the policy data model."""

from __future__ import annotations

from accesscore.permissions import (
    Action,
    BlacklistAccess,
    FullAccess,
    InvalidAccess,
    PermissionValue,
    Principal,
    Role,
    SpecificAccess,
    UserOverride,
    WhitelistAccess,
    parse_module_table,
    parse_resource_policy,
)


class TestPermissionValue:
    """Tri-state parsing of stored cells."""

    def test_true_is_granted(self) -> None:
        assert PermissionValue.parse(True) is PermissionValue.GRANTED

    def test_deny_string_is_denied(self) -> None:
        assert PermissionValue.parse("deny") is PermissionValue.DENIED
        assert PermissionValue.parse("DENIED") is PermissionValue.DENIED

    def test_falsy_values_are_unset(self) -> None:
        """False, None and garbage all mean 'no opinion', never deny or grant."""
        for raw in (False, None, "", 0, 1, "yes", {"x": 1}):
            assert PermissionValue.parse(raw) is PermissionValue.UNSET, raw

    def test_stored_form(self) -> None:
        assert PermissionValue.GRANTED.to_stored() is True
        assert PermissionValue.DENIED.to_stored() == "deny"
        assert PermissionValue.UNSET.to_stored() is None


class TestAction:
    def test_parse_known(self) -> None:
        assert Action.parse("read") is Action.READ
        assert Action.parse("EXPORT") is Action.EXPORT
        assert Action.parse(Action.MANAGE) is Action.MANAGE

    def test_parse_unknown(self) -> None:
        assert Action.parse("approve") is None
        assert Action.parse(None) is None


class TestPrincipal:
    def test_effective_role_prefers_custom_role(self) -> None:
        assert Principal("u1", role="member", custom_role="treasurer").effective_role == "treasurer"
        assert Principal("u1", role="admin").effective_role == "admin"

    def test_membership(self) -> None:
        p = Principal("u1", tenants=("a",))
        assert p.member_of("a")
        assert not p.member_of("b")
        assert not p.member_of("")

    def test_unknown_membership_does_not_block(self) -> None:
        assert Principal("u1").member_of("anything")

    def test_from_document_normalizes_spellings(self) -> None:
        p = Principal.from_document({"uid": "abc", "role": "member", "customRole": "usher", "churchId": "c1"})
        assert p.principal_id == "abc"
        assert p.custom_role == "usher"
        assert p.effective_role == "usher"
        assert p.tenants == ("c1",)

    def test_from_document_without_role(self) -> None:
        """A user record with no role is not promoted to member."""
        p = Principal.from_document({"id": 7})
        assert p.principal_id == "7"
        assert p.role == ""
        assert p.custom_role is None
        assert p.effective_role == ""

    def test_default_role_is_empty(self) -> None:
        assert Principal("u1").effective_role == ""


class TestParseResourcePolicy:
    def test_missing_access_type_is_full(self) -> None:
        assert isinstance(parse_resource_policy({}), FullAccess)

    def test_whitelist(self) -> None:
        policy = parse_resource_policy({"accessType": "whitelist", "allowedResources": ["a", 2]})
        assert isinstance(policy, WhitelistAccess)
        assert policy.allowed_resources == frozenset({"a", "2"})

    def test_blacklist_without_list_is_empty(self) -> None:
        policy = parse_resource_policy({"accessType": "blacklist"})
        assert isinstance(policy, BlacklistAccess)
        assert policy.denied_resources == frozenset()

    def test_specific_drops_non_boolean_cells(self) -> None:
        policy = parse_resource_policy({"accessType": "specific", "specific": {"f1": {"read": True, "update": "yes"}}})
        assert isinstance(policy, SpecificAccess)
        assert policy.specific == {"f1": {"read": True}}

    def test_unknown_access_type_is_invalid(self) -> None:
        policy = parse_resource_policy({"accessType": "greylist"})
        assert isinstance(policy, InvalidAccess)
        assert "greylist" in policy.reason

    def test_non_mapping_is_invalid(self) -> None:
        assert isinstance(parse_resource_policy(["a"]), InvalidAccess)

    def test_malformed_list_is_invalid(self) -> None:
        assert isinstance(parse_resource_policy({"accessType": "whitelist", "allowedResources": {"a": 1}}), InvalidAccess)


class TestRole:
    def test_module_table_parsing(self) -> None:
        table = parse_module_table(
            {
                "forms": {"read": True, "delete": "deny", "update": False, "approve": True},
                "broken": "yes",
            }
        )
        assert table["forms"][Action.READ] is PermissionValue.GRANTED
        assert table["forms"][Action.DELETE] is PermissionValue.DENIED
        assert table["forms"][Action.UPDATE] is PermissionValue.UNSET
        assert "approve" not in {a.value for a in table["forms"]}
        assert "broken" not in table

    def test_missing_cells_are_unset(self) -> None:
        role = Role.from_document({"name": "r", "permissions": {"forms": {"read": True}}}, tenant_id="t")
        assert role.module_permission("forms", Action.CREATE) is PermissionValue.UNSET
        assert role.module_permission("inventory", Action.READ) is PermissionValue.UNSET

    def test_partial_document(self) -> None:
        """A role read mid-edit (no tables at all) is a role with no grants."""
        role = Role.from_document({"name": "draft"})
        assert role.module_permissions == {}
        assert role.resource_permissions == {}

    def test_document_roundtrip_keeps_tri_state(self) -> None:
        doc = {
            "name": "editor",
            "permissions": {"forms": {"read": True, "delete": "deny"}},
            "resourcePermissions": {"form": {"accessType": "whitelist", "allowedResources": ["b", "a"]}},
        }
        stored = Role.from_document(doc, tenant_id="t").to_document()
        assert stored["tenantId"] == "t"
        assert stored["permissions"] == {"forms": {"read": True, "delete": "deny"}}
        assert stored["resourcePermissions"]["form"] == {"accessType": "whitelist", "allowedResources": ["a", "b"]}


class TestUserOverride:
    def test_lookup(self) -> None:
        override = UserOverride(
            principal_id="u", tenant_id="t", permissions={"form": {"f1": {"read": True, "delete": False}}}
        )
        assert override.lookup("form", "f1", Action.READ) is True
        assert override.lookup("form", "f1", "delete") is False

    def test_lookup_without_opinion(self) -> None:
        override = UserOverride(principal_id="u", tenant_id="t", permissions={"form": {"f1": {"read": True}}})
        assert override.lookup("form", "f1", Action.UPDATE) is None
        assert override.lookup("form", "f2", Action.READ) is None
        assert override.lookup("gallery", "f1", Action.READ) is None

    def test_deny_strings_read_as_false(self) -> None:
        override = UserOverride(principal_id="u", tenant_id="t", permissions={"form": {"f1": {"read": "deny"}}})
        assert override.lookup("form", "f1", Action.READ) is False

    def test_with_flag_does_not_mutate(self) -> None:
        original = UserOverride(principal_id="u", tenant_id="t")
        updated = original.with_flag("gallery", "g1", Action.READ, True)
        assert original.permissions == {}
        assert updated.lookup("gallery", "g1", Action.READ) is True
