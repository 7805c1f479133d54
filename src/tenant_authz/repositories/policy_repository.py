from __future__ import annotations

from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from tenant_authz.configs.settings import Settings
from tenant_authz.configs.logging_config import get_logger
from tenant_authz.domain.entities.policy import PermissionRecord, PolicyDocument, RoleRecord
from tenant_authz.errors import PolicyConfigError

log = get_logger(__name__)


class PolicyRepository:
    """
    Reads role and permission documents once at startup.

    Read-only: seeding and administration of these collections happen elsewhere.
    """

    def __init__(self, db: AsyncIOMotorDatabase, settings: Settings):
        self._db = db
        self._settings = settings
        self._roles = db[settings.mongo_roles_collection]
        self._permissions = db[settings.mongo_permissions_collection]

    async def _fetch(self, col) -> list[dict[str, Any]]:
        docs: list[dict[str, Any]] = []
        async for doc in col.find({}, projection={"_id": 0}):
            docs.append(doc)
        return docs

    async def load(self) -> PolicyDocument:
        log.info(
            "repo.policy.load start roles_col=%s permissions_col=%s",
            self._settings.mongo_roles_collection,
            self._settings.mongo_permissions_collection,
        )
        role_docs = await self._fetch(self._roles)
        permission_docs = await self._fetch(self._permissions)
        try:
            document = PolicyDocument(
                roles=[RoleRecord.model_validate(d) for d in role_docs],
                permissions=[PermissionRecord.model_validate(d) for d in permission_docs],
            )
        except ValidationError as e:
            log.error("repo.policy.load invalid_document error=%s", str(e))
            raise PolicyConfigError(f"invalid policy document in mongo: {e}") from e
        log.info(
            "repo.policy.load done roles=%s permissions=%s",
            len(document.roles),
            len(document.permissions),
        )
        return document
