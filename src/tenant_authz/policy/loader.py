from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from tenant_authz.authz.engine import AuthorizationEngine, PolicyRoles
from tenant_authz.authz.tracing import DecisionTracer, LoggingTracer
from tenant_authz.configs.logging_config import get_logger
from tenant_authz.configs.settings import Settings, split_csv
from tenant_authz.domain.entities.permission import WILDCARD, Permission, Scope
from tenant_authz.domain.entities.policy import PolicyDocument
from tenant_authz.domain.entities.role import Role
from tenant_authz.errors import PolicyConfigError
from tenant_authz.policy.defaults import default_policy
from tenant_authz.policy.permission_table import PermissionTable
from tenant_authz.policy.role_registry import RoleRegistry

log = get_logger(__name__)

# lowercase kebab/snake identifiers, e.g. "case-notes", "reset-password", "hour_allocations"
_IDENTIFIER = re.compile(r"^[a-z][a-z0-9_-]*$")


@dataclass(frozen=True)
class Policy:
    roles: RoleRegistry
    permissions: PermissionTable


def _check_identifier(kind: str, value: str, *, allow_wildcard: bool) -> None:
    if allow_wildcard and value == WILDCARD:
        return
    if not _IDENTIFIER.match(value):
        raise PolicyConfigError(f"malformed {kind} identifier: {value!r}")


def build_policy(
    document: PolicyDocument,
    *,
    known_modules: Iterable[str] = (),
    reserved_roles: Iterable[str] = (),
) -> Policy:
    """
    Validate a policy document and freeze it into lookup tables.

    Raises PolicyConfigError on any inconsistency; callers let it abort startup.
    """
    roles = RoleRegistry(
        Role(
            name=r.name,
            level=r.level,
            description=r.description or "",
            aliases=frozenset(r.aliases),
        )
        for r in document.roles
    )

    known = frozenset(known_modules)
    permissions: list[Permission] = []
    for rec in document.permissions:
        role = roles.lookup(rec.role)
        if role is None:
            raise PolicyConfigError(f"permission references unknown role: {rec.role}")
        if role.name != rec.role:
            raise PolicyConfigError(
                f"permission must use canonical role name {role.name}, got {rec.role}"
            )
        _check_identifier("module", rec.module, allow_wildcard=True)
        if known and rec.module != WILDCARD and rec.module not in known:
            raise PolicyConfigError(f"unknown module for role={rec.role}: {rec.module}")
        if not rec.actions:
            raise PolicyConfigError(f"empty action list for role={rec.role} module={rec.module}")
        for action in rec.actions:
            _check_identifier("action", action, allow_wildcard=True)
        try:
            scope = Scope.parse(rec.scope)
        except ValueError as e:
            raise PolicyConfigError(
                f"unknown scope {rec.scope!r} for role={rec.role} module={rec.module}"
            ) from e
        permissions.append(
            Permission(role=role.name, module=rec.module, actions=frozenset(rec.actions), scope=scope)
        )

    for name in reserved_roles:
        if not name:
            continue
        reserved = roles.lookup(name)
        if reserved is None or reserved.name != name:
            raise PolicyConfigError(f"reserved role not present in registry: {name}")

    table = PermissionTable(permissions)
    log.info("policy.build.done roles=%s permissions=%s", len(roles), len(table))
    return Policy(roles=roles, permissions=table)


def read_policy_file(path: str | Path) -> PolicyDocument:
    path = Path(path)
    log.info("policy.file.read path=%s", path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return PolicyDocument.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise PolicyConfigError(f"cannot load policy file {path}: {e}") from e


def load_document(settings: Settings) -> PolicyDocument:
    """Synchronous sources only; the Mongo source is loaded by PolicyRepository."""
    source = settings.POLICY_SOURCE.lower()
    if source == "builtin":
        return default_policy()
    if source == "file":
        if not settings.POLICY_FILE:
            raise PolicyConfigError("POLICY_SOURCE=file requires POLICY_FILE")
        return read_policy_file(settings.POLICY_FILE)
    raise PolicyConfigError(f"unsupported synchronous policy source: {settings.POLICY_SOURCE}")


def build_engine(
    settings: Settings,
    document: PolicyDocument,
    tracer: DecisionTracer | None = None,
) -> AuthorizationEngine:
    policy_roles = PolicyRoles(
        superuser_role=settings.SUPERUSER_ROLE,
        tenant_admin_role=settings.TENANT_ADMIN_ROLE,
        privileged_level=settings.PRIVILEGED_LEVEL,
    )
    policy = build_policy(
        document,
        known_modules=split_csv(settings.KNOWN_MODULES),
        reserved_roles=(policy_roles.superuser_role, policy_roles.tenant_admin_role),
    )
    if tracer is None:
        trace_modules = split_csv(settings.TRACE_MODULES)
        tracer = LoggingTracer(trace_modules) if trace_modules else None
    return AuthorizationEngine(policy.roles, policy.permissions, policy_roles, tracer)
