from __future__ import annotations

from fastapi import APIRouter, Request

from tenant_authz.utils.response import success

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict:
    engine = getattr(request.app.state, "engine", None)
    data = {"ok": engine is not None}
    if engine is not None:
        data["roles"] = len(engine.roles)
        data["permissions"] = len(engine.permissions)
    return success(data, message="healthy" if engine is not None else "policy not loaded")
