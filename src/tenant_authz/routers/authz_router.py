from fastapi import APIRouter, Depends

from tenant_authz.auth.dependencies import get_engine, get_principal, require_permission
from tenant_authz.auth.models import Principal
from tenant_authz.authz.engine import AuthorizationEngine
from tenant_authz.domain.entities.decision import AuthorizeRequest
from tenant_authz.utils.response import success
from tenant_authz.configs.logging_config import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/authz", tags=["authz"])


@router.post("/check")
async def check(
    body: AuthorizeRequest,
    engine: AuthorizationEngine = Depends(get_engine),
) -> dict:
    allowed = engine.authorize(
        body.principal.to_principal(),
        body.module,
        body.action,
        body.target_tenant_id,
        body.target_resource_id,
    )
    log.info(
        "authz.check request_id=%s role=%s module=%s action=%s allowed=%s",
        body.request_id,
        body.principal.role,
        body.module,
        body.action,
        allowed,
    )
    return success({"allowed": allowed})


@router.get("/me")
async def me(
    principal: Principal = Depends(get_principal),
    engine: AuthorizationEngine = Depends(get_engine),
) -> dict:
    return success(
        {
            "user_id": principal.user_id,
            "role": principal.role,
            "tenant_id": principal.tenant_id,
            "is_privileged": engine.is_privileged(principal),
            "is_platform_operator": engine.is_platform_operator(principal),
        }
    )


@router.get("/me/modules/{module}")
async def my_module(
    module: str,
    principal: Principal = Depends(get_principal),
    engine: AuthorizationEngine = Depends(get_engine),
) -> dict:
    return success(
        {
            "module": module,
            "can_access": engine.can_access_module(principal, module),
            "actions": engine.list_available_actions(principal, module),
        }
    )


@router.get("/policy")
async def policy(
    principal: Principal = Depends(require_permission("policy", "view")),
    engine: AuthorizationEngine = Depends(get_engine),
) -> dict:
    """Role levels and the reserved roles, for auditing the escalation surface."""
    log.info("authz.policy.view user_id=%s role=%s", principal.user_id, principal.role)
    reserved = engine.policy_roles
    return success(
        {
            "superuser_role": reserved.superuser_role,
            "tenant_admin_role": reserved.tenant_admin_role,
            "privileged_level": reserved.privileged_level,
            "roles": [
                {"name": r.name, "level": r.level, "description": r.description}
                for r in sorted(engine.roles, key=lambda r: r.level)
            ],
        }
    )
