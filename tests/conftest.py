"""Shared fixtures for accesscore tests."""

from __future__ import annotations

import pytest

from accesscore import DecisionEngine, InMemoryPolicyStore, PolicyAdmin, Principal

TENANT = "church-1"
OTHER_TENANT = "church-2"


@pytest.fixture
def store() -> InMemoryPolicyStore:
    return InMemoryPolicyStore()


@pytest.fixture
def engine(store: InMemoryPolicyStore) -> DecisionEngine:
    return DecisionEngine(store)


@pytest.fixture
def admin(store: InMemoryPolicyStore) -> PolicyAdmin:
    return PolicyAdmin(store)


@pytest.fixture
def member() -> Principal:
    return Principal(principal_id="u-member", role="member", tenants=(TENANT,))


@pytest.fixture
def editor() -> Principal:
    """Member whose custom role 'editor' is authored per test."""
    return Principal(principal_id="u-editor", role="member", custom_role="editor", tenants=(TENANT,))
