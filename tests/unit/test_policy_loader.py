from __future__ import annotations

import json

import pytest

from tenant_authz.authz.tracing import LoggingTracer
from tenant_authz.configs.settings import Settings
from tenant_authz.domain.entities.permission import Scope
from tenant_authz.domain.entities.policy import PermissionRecord, PolicyDocument, RoleRecord
from tenant_authz.errors import PolicyConfigError
from tenant_authz.policy.defaults import default_policy
from tenant_authz.policy.loader import build_engine, build_policy, load_document, read_policy_file

ROLES = [RoleRecord(name="Coordinator", level=3), RoleRecord(name="Admin", level=4)]


def _doc(*permissions: PermissionRecord) -> PolicyDocument:
    return PolicyDocument(roles=list(ROLES), permissions=list(permissions))


def _perm(**overrides) -> PermissionRecord:
    data = {"role": "Coordinator", "module": "staff", "actions": ["view"], "scope": "tenant"}
    data.update(overrides)
    return PermissionRecord(**data)


def test_default_policy_builds() -> None:
    policy = build_policy(default_policy(), reserved_roles=("ConsoleManager", "Admin"))
    assert len(policy.roles) == 5
    assert policy.permissions.lookup("Coordinator", "staff").scope is Scope.TENANT


def test_legacy_company_scope_loads_as_tenant() -> None:
    policy = build_policy(_doc(_perm(scope="Company")))
    assert policy.permissions.lookup("Coordinator", "staff").scope is Scope.TENANT


@pytest.mark.parametrize(
    "perm",
    [
        _perm(role="Ghost"),
        _perm(role="coordinator"),
        _perm(module="Staff Members"),
        _perm(module=""),
        _perm(actions=[]),
        _perm(actions=["View!"]),
        _perm(scope="everywhere"),
    ],
)
def test_invalid_permission_rejected(perm) -> None:
    with pytest.raises(PolicyConfigError):
        build_policy(_doc(perm))


def test_duplicate_pair_rejected() -> None:
    with pytest.raises(PolicyConfigError):
        build_policy(_doc(_perm(), _perm(actions=["edit"])))


def test_known_modules_catch_typos() -> None:
    build_policy(_doc(_perm(module="*", actions=["*"])), known_modules=["clients"])
    with pytest.raises(PolicyConfigError):
        build_policy(_doc(_perm(module="stafff")), known_modules=["staff", "clients"])


def test_reserved_role_must_exist() -> None:
    with pytest.raises(PolicyConfigError):
        build_policy(_doc(_perm()), reserved_roles=("ConsoleManager",))
    with pytest.raises(PolicyConfigError):
        build_policy(_doc(_perm()), reserved_roles=("admin",))


def test_read_policy_file(tmp_path) -> None:
    path = tmp_path / "policy.json"
    path.write_text(
        json.dumps(
            {
                "roles": [{"name": "Coordinator", "level": 3}],
                "permissions": [
                    {"role": "Coordinator", "module": "shifts", "actions": ["view"], "scope": "tenant"}
                ],
            }
        ),
        encoding="utf-8",
    )
    document = read_policy_file(path)
    assert document.roles[0].name == "Coordinator"
    assert document.permissions[0].module == "shifts"


@pytest.mark.parametrize("content", ["{not json", json.dumps({"roles": [{"name": "X"}]})])
def test_read_policy_file_errors(tmp_path, content) -> None:
    path = tmp_path / "policy.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(PolicyConfigError):
        read_policy_file(path)


def test_read_missing_policy_file(tmp_path) -> None:
    with pytest.raises(PolicyConfigError):
        read_policy_file(tmp_path / "missing.json")


def test_load_document_sources(tmp_path) -> None:
    assert load_document(Settings(POLICY_SOURCE="builtin")).roles
    with pytest.raises(PolicyConfigError):
        load_document(Settings(POLICY_SOURCE="file", POLICY_FILE=None))
    with pytest.raises(PolicyConfigError):
        load_document(Settings(POLICY_SOURCE="mongo"))


def test_build_engine_from_settings() -> None:
    settings = Settings(TRACE_MODULES="staff, clients", KNOWN_MODULES="")
    engine = build_engine(settings, default_policy())
    assert isinstance(engine._tracer, LoggingTracer)
    assert engine.policy_roles.superuser_role == "ConsoleManager"
    assert engine.policy_roles.privileged_level == 4


def test_build_engine_rejects_missing_reserved_role() -> None:
    with pytest.raises(PolicyConfigError):
        build_engine(Settings(SUPERUSER_ROLE="PlatformOperator"), default_policy())
