from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from tenant_authz.auth.models import Principal

Identifier = Union[int, str]


class Envelope(BaseModel):
    request_id: str | None = None


class PrincipalPayload(BaseModel):
    user_id: Optional[Identifier] = None
    role: Optional[str] = None
    tenant_id: Optional[Identifier] = None
    assigned_resource_ids: List[Identifier] = Field(default_factory=list)

    def to_principal(self) -> Principal:
        return Principal.build(
            user_id=self.user_id,
            role=self.role,
            tenant_id=self.tenant_id,
            assigned_resource_ids=self.assigned_resource_ids,
        )


class AuthorizeRequest(Envelope):
    principal: PrincipalPayload
    module: str
    action: str
    target_tenant_id: Optional[Identifier] = None
    target_resource_id: Optional[Identifier] = None

    @field_validator("target_tenant_id", "target_resource_id", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
