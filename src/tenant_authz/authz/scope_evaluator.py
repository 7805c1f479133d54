from __future__ import annotations

from typing import Any, Optional

from tenant_authz.auth.models import Principal, same_id
from tenant_authz.domain.entities.permission import Scope


def evaluate_scope(
    scope: Any,
    principal: Optional[Principal],
    target_tenant_id: Any = None,
    target_resource_id: Any = None,
) -> bool:
    """
    Decide whether a permission's scope condition holds for a principal.

    - GLOBAL: always holds.
    - TENANT: holds with no target tenant (tenant-wide self access) or a matching one.
    - ASSIGNED: needs a target resource the principal is assigned to.

    Anything else, including an unknown scope kind, evaluates to False.
    """
    if principal is None:
        return False

    if scope == Scope.GLOBAL:
        return True

    if scope == Scope.TENANT:
        if target_tenant_id is None:
            return True
        return same_id(principal.tenant_id, target_tenant_id)

    if scope == Scope.ASSIGNED:
        if target_resource_id is None:
            return False
        return any(same_id(r, target_resource_id) for r in principal.assigned_resource_ids or ())

    return False
