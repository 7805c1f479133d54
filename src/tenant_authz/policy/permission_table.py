from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from tenant_authz.domain.entities.permission import WILDCARD, Permission
from tenant_authz.errors import PolicyConfigError


class PermissionTable:
    """
    Read-only (role, module) -> Permission map.

    An entry for module "*" is the role's fallback and is only consulted when
    the role has no entry for the exact module.
    """

    def __init__(self, permissions: Iterable[Permission]):
        table: dict[tuple[str, str], Permission] = {}
        for perm in permissions:
            key = (perm.role, perm.module)
            if key in table:
                raise PolicyConfigError(
                    f"duplicate permission for role={perm.role} module={perm.module}"
                )
            table[key] = perm
        self._table = MappingProxyType(table)

    def lookup(self, role_name: Optional[str], module: Optional[str]) -> Optional[Permission]:
        if not role_name or not isinstance(module, str):
            return None
        # Exact (role, module) row wins over the role's "*" row. First-match-in-order
        # lookup would let Admin's "*" row shadow its "staff" row and allow export there.
        perm = self._table.get((role_name, module))
        if perm is None:
            perm = self._table.get((role_name, WILDCARD))
        return perm

    def for_role(self, role_name: str) -> list[Permission]:
        return [p for (role, _), p in self._table.items() if role == role_name]

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)
