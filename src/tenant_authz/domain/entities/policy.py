from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RoleRecord(BaseModel):
    """
    Role as stored in a policy document (JSON file or `authz_roles` collection).
    """

    name: str
    level: int
    description: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class PermissionRecord(BaseModel):
    """
    Permission as stored in a policy document (JSON file or `authz_permissions` collection).
    """

    role: str
    module: str
    actions: List[str]
    scope: str

    @field_validator("role", "module", mode="before")
    @classmethod
    def strip_identifier(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("scope", mode="before")
    @classmethod
    def normalize_scope(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PolicyDocument(BaseModel):
    roles: List[RoleRecord] = Field(default_factory=list)
    permissions: List[PermissionRecord] = Field(default_factory=list)
