from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from tenant_authz.domain.entities.role import Role
from tenant_authz.errors import PolicyConfigError


def _key(name: str) -> str:
    return name.strip().lower()


class RoleRegistry:
    """
    Read-only role lookup.

    Names resolve case-insensitively, and legacy aliases resolve to their
    canonical role. A miss returns None; callers treat that as a denial.
    """

    def __init__(self, roles: Iterable[Role]):
        by_name: dict[str, Role] = {}
        index: dict[str, Role] = {}
        for role in roles:
            if not role.name:
                raise PolicyConfigError("role with empty name")
            if role.name in by_name:
                raise PolicyConfigError(f"duplicate role: {role.name}")
            by_name[role.name] = role
            for key in {_key(role.name), *(_key(a) for a in role.aliases)}:
                owner = index.get(key)
                if owner is not None and owner.name != role.name:
                    raise PolicyConfigError(
                        f"role name/alias '{key}' claimed by both {owner.name} and {role.name}"
                    )
                index[key] = role
        self._roles = MappingProxyType(by_name)
        self._index = MappingProxyType(index)

    def lookup(self, name: Optional[str]) -> Optional[Role]:
        if not isinstance(name, str) or not name.strip():
            return None
        return self._index.get(_key(name))

    get = lookup

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[Role]:
        return iter(self._roles.values())

    def __len__(self) -> int:
        return len(self._roles)
