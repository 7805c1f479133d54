from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from tenant_authz.auth.models import Principal, same_id
from tenant_authz.authz.scope_evaluator import evaluate_scope
from tenant_authz.authz.tracing import DecisionStep, DecisionTracer, NoopTracer
from tenant_authz.configs.logging_config import get_logger
from tenant_authz.domain.entities.permission import CANONICAL_ACTIONS, Permission, Scope
from tenant_authz.domain.entities.role import Role
from tenant_authz.policy.permission_table import PermissionTable
from tenant_authz.policy.role_registry import RoleRegistry

log = get_logger(__name__)


@dataclass(frozen=True)
class PolicyRoles:
    """Reserved role names and thresholds the engine treats specially."""

    superuser_role: str = "ConsoleManager"
    tenant_admin_role: str = "Admin"
    privileged_level: int = 4
    canonical_actions: tuple[str, ...] = CANONICAL_ACTIONS


class AuthorizationEngine:
    """
    Answers "may principal P perform action A on module M (for tenant T / resource R)?".

    Pure and synchronous: every query reads only the immutable registry and
    table plus its arguments, and every unresolved condition returns False.
    Safe to share across threads and tasks.
    """

    def __init__(
        self,
        roles: RoleRegistry,
        permissions: PermissionTable,
        policy_roles: PolicyRoles | None = None,
        tracer: DecisionTracer | None = None,
    ):
        self._roles = roles
        self._permissions = permissions
        self._policy_roles = policy_roles or PolicyRoles()
        self._tracer: DecisionTracer = tracer or NoopTracer()

    @property
    def roles(self) -> RoleRegistry:
        return self._roles

    @property
    def permissions(self) -> PermissionTable:
        return self._permissions

    @property
    def policy_roles(self) -> PolicyRoles:
        return self._policy_roles

    # ----------------------------
    # Privilege-escalation surface
    # ----------------------------

    def is_superuser(self, role: Optional[Role]) -> bool:
        return role is not None and role.name == self._policy_roles.superuser_role

    def is_tenant_administrator(self, role: Optional[Role]) -> bool:
        return role is not None and role.name == self._policy_roles.tenant_admin_role

    # ----------------------------
    # Decision
    # ----------------------------

    def authorize(
        self,
        principal: Optional[Principal],
        module: str,
        action: str,
        target_tenant_id: Any = None,
        target_resource_id: Any = None,
    ) -> bool:
        trace = self._trace
        ctx = {"module": module, "action": action}

        if principal is None or not principal.role:
            trace(DecisionStep.PRINCIPAL, False, **ctx)
            return False
        trace(DecisionStep.PRINCIPAL, True, user_id=principal.user_id, **ctx)

        role = self._resolve_role(principal)
        if role is None:
            trace(DecisionStep.ROLE, False, role=principal.role, **ctx)
            return False
        trace(DecisionStep.ROLE, True, role=role.name, **ctx)

        if self.is_superuser(role):
            trace(DecisionStep.SUPERUSER, True, role=role.name, **ctx)
            return True
        trace(DecisionStep.SUPERUSER, False, role=role.name, **ctx)

        if target_tenant_id is not None and not same_id(principal.tenant_id, target_tenant_id):
            trace(
                DecisionStep.TENANT_BOUNDARY,
                False,
                tenant_id=principal.tenant_id,
                target_tenant_id=target_tenant_id,
                **ctx,
            )
            return False
        trace(DecisionStep.TENANT_BOUNDARY, True, tenant_id=principal.tenant_id, **ctx)

        permission = self._permissions.lookup(role.name, module)
        if permission is None:
            trace(DecisionStep.PERMISSION, False, role=role.name, **ctx)
            return False
        scope_name = getattr(permission.scope, "value", permission.scope)
        trace(DecisionStep.PERMISSION, True, role=role.name, scope=scope_name, **ctx)

        if not permission.allows(action):
            trace(DecisionStep.ACTION, False, allowed=sorted(permission.actions), **ctx)
            return False
        trace(DecisionStep.ACTION, True, **ctx)

        if permission.scope == Scope.TENANT and self.is_tenant_administrator(role):
            # Mismatched explicit tenants were rejected at the boundary step,
            # so this only ever agrees with the TENANT scope's own default.
            allowed = True
        else:
            allowed = evaluate_scope(
                permission.scope, principal, target_tenant_id, target_resource_id
            )
        trace(
            DecisionStep.SCOPE,
            allowed,
            scope=scope_name,
            target_resource_id=target_resource_id,
            **ctx,
        )
        trace(DecisionStep.DECISION, allowed, **ctx)
        return allowed

    # ----------------------------
    # Derived queries
    # ----------------------------

    def can_access_module(self, principal: Optional[Principal], module: str) -> bool:
        role = self._resolve_role(principal)
        if role is None:
            return False
        if self.is_superuser(role):
            return True
        permission = self._permissions.lookup(role.name, module)
        return permission is not None and len(permission.actions) > 0

    def list_available_actions(self, principal: Optional[Principal], module: str) -> list[str]:
        """
        Actions the principal's role may perform on a module, for display.

        A wildcard grant expands to the canonical vocabulary; literal grants are
        listed canonical-first, then any custom actions alphabetically.
        """
        role = self._resolve_role(principal)
        if role is None:
            return []
        permission = self._permissions.lookup(role.name, module)
        if permission is None:
            return []
        return self._expand_actions(permission)

    def is_privileged(self, principal: Optional[Principal]) -> bool:
        role = self._resolve_role(principal)
        return role is not None and role.level >= self._policy_roles.privileged_level

    def is_platform_operator(self, principal: Optional[Principal]) -> bool:
        return self.is_superuser(self._resolve_role(principal))

    def has_minimum_role(self, principal: Optional[Principal], minimum_role: str) -> bool:
        role = self._resolve_role(principal)
        minimum = self._roles.lookup(minimum_role)
        if role is None or minimum is None:
            return False
        return role.level >= minimum.level

    def can_access_tenant(self, principal: Optional[Principal], tenant_id: Any) -> bool:
        role = self._resolve_role(principal)
        if role is None:
            return False
        if self.is_superuser(role):
            return True
        return same_id(principal.tenant_id, tenant_id)

    # ----------------------------
    # Helpers
    # ----------------------------

    def _trace(self, step: DecisionStep, passed: bool, **details: Any) -> None:
        # a failing tracer must not turn a decision into an exception
        try:
            self._tracer.record(step, passed, **details)
        except Exception:
            log.exception("authz.tracer_failed step=%s", step.value)

    def _resolve_role(self, principal: Optional[Principal]) -> Optional[Role]:
        if principal is None or not principal.role:
            return None
        return self._roles.lookup(principal.role)

    def _expand_actions(self, permission: Permission) -> list[str]:
        canonical = self._policy_roles.canonical_actions
        if permission.allows_all_actions:
            return list(canonical)
        ordered = [a for a in canonical if a in permission.actions]
        ordered.extend(sorted(a for a in permission.actions if a not in canonical))
        return ordered
