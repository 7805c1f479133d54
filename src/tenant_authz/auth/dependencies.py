from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request

from tenant_authz.auth.models import Principal
from tenant_authz.authz.engine import AuthorizationEngine
from tenant_authz.errors import AuthError, ForbiddenError
from tenant_authz.configs.logging_config import get_logger

log = get_logger(__name__)

# Set by the gateway after it has authenticated the caller.
HEADER_USER_ID = "X-Trusted-User-Id"
HEADER_USER_ROLE = "X-Trusted-User-Role"
HEADER_TENANT_ID = "X-Trusted-Tenant-Id"
HEADER_ASSIGNED_RESOURCES = "X-Trusted-Assigned-Resources"


def _split_ids(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(v.strip() for v in raw.split(",") if v.strip())


def get_engine(request: Request) -> AuthorizationEngine:
    return request.app.state.engine


async def get_principal(request: Request) -> Principal:
    """
    Assemble the principal from trusted gateway headers.

    No credential checks happen here; a request without identity headers is
    rejected as unauthenticated.
    """
    headers = request.headers
    user_id = headers.get(HEADER_USER_ID)
    role = headers.get(HEADER_USER_ROLE)
    tenant_id = headers.get(HEADER_TENANT_ID)

    if not user_id or not role or not tenant_id:
        log.info(
            "auth.missing_identity_headers has_user=%s has_role=%s has_tenant=%s",
            bool(user_id),
            bool(role),
            bool(tenant_id),
        )
        raise AuthError("missing identity headers")

    log.info("auth.principal tenant_id=%s user_id=%s role=%s", tenant_id, user_id, role)
    return Principal.build(
        user_id=user_id,
        role=role,
        tenant_id=tenant_id,
        assigned_resource_ids=_split_ids(headers.get(HEADER_ASSIGNED_RESOURCES)),
    )


def require_permission(
    module: str,
    action: str,
    *,
    tenant_param: str | None = None,
    resource_param: str | None = None,
) -> Callable:
    """
    Route dependency that turns a negative decision into a 403.

    `tenant_param` / `resource_param` name path parameters carrying the target
    tenant and resource ids.
    """

    async def _dependency(
        request: Request,
        principal: Principal = Depends(get_principal),
        engine: AuthorizationEngine = Depends(get_engine),
    ) -> Principal:
        target_tenant_id = request.path_params.get(tenant_param) if tenant_param else None
        target_resource_id = request.path_params.get(resource_param) if resource_param else None
        if not engine.authorize(principal, module, action, target_tenant_id, target_resource_id):
            log.info(
                "auth.denied user_id=%s role=%s module=%s action=%s target_tenant=%s target_resource=%s",
                principal.user_id,
                principal.role,
                module,
                action,
                target_tenant_id,
                target_resource_id,
            )
            raise ForbiddenError("insufficient permissions")
        return principal

    return _dependency
