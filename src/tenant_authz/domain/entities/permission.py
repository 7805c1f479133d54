from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

WILDCARD = "*"

# Display vocabulary used when a permission grants every action.
CANONICAL_ACTIONS: tuple[str, ...] = ("view", "create", "edit", "delete", "export")


class Scope(str, Enum):
    GLOBAL = "global"
    TENANT = "tenant"
    ASSIGNED = "assigned"

    @classmethod
    def parse(cls, value: str | Scope) -> Scope:
        if isinstance(value, Scope):
            return value
        normalized = str(value).strip().lower()
        # "company" is the historical name of the tenant scope
        if normalized == "company":
            return cls.TENANT
        return cls(normalized)


@dataclass(frozen=True)
class Permission:
    role: str
    module: str
    actions: frozenset[str]
    scope: Scope

    @property
    def allows_all_actions(self) -> bool:
        return WILDCARD in self.actions

    def allows(self, action: str) -> bool:
        return self.allows_all_actions or action in self.actions
