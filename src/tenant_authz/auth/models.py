from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable


@dataclass(frozen=True)
class Principal:
    """
    Identity an authorization question is asked about.

    Assembled by the session layer once per request; ids may be ints or strings.
    """

    user_id: str | None
    role: str | None
    tenant_id: Hashable | None
    assigned_resource_ids: frozenset = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        *,
        user_id,
        role: str | None,
        tenant_id,
        assigned_resource_ids=(),
    ) -> Principal:
        return cls(
            user_id=None if user_id is None else str(user_id),
            role=role,
            tenant_id=tenant_id,
            assigned_resource_ids=frozenset(assigned_resource_ids or ()),
        )


def same_id(left, right) -> bool:
    """Tenant/resource ids compare by string form so 3 and "3" match."""
    if left is None or right is None:
        return False
    return str(left) == str(right)
