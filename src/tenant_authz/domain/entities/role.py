from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Role:
    name: str
    level: int
    description: str = ""
    # legacy spellings that resolve to this role (matched case-insensitively)
    aliases: frozenset[str] = field(default_factory=frozenset)
