from __future__ import annotations

import pytest

from tenant_authz.auth.models import Principal
from tenant_authz.authz.engine import AuthorizationEngine, PolicyRoles
from tenant_authz.policy.defaults import default_policy
from tenant_authz.policy.loader import build_policy


@pytest.fixture
def engine() -> AuthorizationEngine:
    policy = build_policy(default_policy())
    return AuthorizationEngine(policy.roles, policy.permissions, PolicyRoles())


@pytest.fixture
def make_principal():
    def _make(role, tenant_id=3, assigned=(), user_id="u-1") -> Principal:
        return Principal.build(
            user_id=user_id, role=role, tenant_id=tenant_id, assigned_resource_ids=assigned
        )

    return _make
