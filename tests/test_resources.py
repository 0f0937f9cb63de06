"""Tests for resource policy evaluation."""

from __future__ import annotations

import pytest

from accesscore.permissions import (
    ALL_ACTIONS,
    Action,
    BlacklistAccess,
    FullAccess,
    InvalidAccess,
    SpecificAccess,
    WhitelistAccess,
    evaluate_resource_policy,
)


class TestFullAccess:
    def test_full_allows_everything(self) -> None:
        for action in ALL_ACTIONS:
            assert evaluate_resource_policy(FullAccess(), "anything", action)

    def test_absent_policy_is_full(self) -> None:
        assert evaluate_resource_policy(None, "anything", Action.DELETE)


class TestWhitelist:
    def test_listed_ids_only(self) -> None:
        policy = WhitelistAccess(allowed_resources={"A", "B"})
        assert evaluate_resource_policy(policy, "A", Action.READ)
        assert evaluate_resource_policy(policy, "B", Action.READ)
        assert not evaluate_resource_policy(policy, "C", Action.READ)

    def test_empty_whitelist_denies_all(self) -> None:
        assert not evaluate_resource_policy(WhitelistAccess(), "A", Action.READ)


class TestBlacklist:
    def test_listed_ids_blocked_for_every_action(self) -> None:
        policy = BlacklistAccess(denied_resources={"A"})
        for action in ALL_ACTIONS:
            assert not evaluate_resource_policy(policy, "A", action)
            assert evaluate_resource_policy(policy, "Z", action)


class TestSpecific:
    @pytest.fixture
    def policy(self) -> SpecificAccess:
        return SpecificAccess(specific={"A": {"read": True, "delete": False}})

    def test_listed_action(self, policy: SpecificAccess) -> None:
        assert evaluate_resource_policy(policy, "A", Action.READ)

    def test_unlisted_action_is_denied(self, policy: SpecificAccess) -> None:
        assert not evaluate_resource_policy(policy, "A", Action.UPDATE)

    def test_explicit_false(self, policy: SpecificAccess) -> None:
        assert not evaluate_resource_policy(policy, "A", Action.DELETE)

    def test_unlisted_resource_is_denied(self, policy: SpecificAccess) -> None:
        assert not evaluate_resource_policy(policy, "B", Action.READ)

    def test_string_action(self, policy: SpecificAccess) -> None:
        assert evaluate_resource_policy(policy, "A", "read")


class TestInvalidPolicy:
    def test_invalid_policy_denies(self) -> None:
        assert not evaluate_resource_policy(InvalidAccess(reason="bad"), "A", Action.READ)

    def test_unknown_object_denies(self) -> None:
        assert not evaluate_resource_policy({"accessType": "whitelist"}, "A", Action.READ)

    def test_numeric_ids_compare_as_strings(self) -> None:
        policy = WhitelistAccess(allowed_resources=[1, 2])
        assert evaluate_resource_policy(policy, 1, Action.READ)  # type: ignore[arg-type]
