"""
Built-in policy for the care platform.

Used when POLICY_SOURCE=builtin and as the seed shape for file/Mongo sources.
"""

from __future__ import annotations

from tenant_authz.domain.entities.policy import PermissionRecord, PolicyDocument, RoleRecord

ROLES = [
    RoleRecord(
        name="SupportWorker",
        level=1,
        description="View assigned content only",
        aliases=["staff", "viewer"],
    ),
    RoleRecord(name="TeamLeader", level=2, description="Edit content for assigned clients"),
    RoleRecord(name="Coordinator", level=3, description="Full access to shifts & staff"),
    RoleRecord(name="Admin", level=4, description="All access in company"),
    RoleRecord(name="ConsoleManager", level=5, description="Global system access"),
]

# role -> [(module, actions, scope)]
_MATRIX: dict[str, list[tuple[str, list[str], str]]] = {
    "SupportWorker": [
        ("clients", ["view"], "assigned"),
        ("shifts", ["view"], "assigned"),
        ("forms", ["view", "create"], "assigned"),
        ("reports", ["view"], "assigned"),
        ("case-notes", ["view", "create"], "assigned"),
        ("observations", ["view", "create"], "assigned"),
        ("medications", ["view", "create"], "assigned"),
        ("care-plans", ["view"], "assigned"),
        ("incidents", ["create"], "assigned"),
        ("hour-allocations", ["view"], "assigned"),
    ],
    "TeamLeader": [
        ("clients", ["view", "edit"], "assigned"),
        ("shifts", ["view", "edit"], "assigned"),
        ("forms", ["view", "create", "edit"], "assigned"),
        ("reports", ["view", "create"], "assigned"),
        ("case-notes", ["view", "create", "edit"], "assigned"),
        ("observations", ["view", "create", "edit"], "assigned"),
        ("medications", ["view", "edit"], "assigned"),
        ("care-plans", ["view", "edit"], "assigned"),
        ("incidents", ["view", "create", "edit"], "assigned"),
        ("staff", ["view"], "tenant"),
        ("hour-allocations", ["view", "create", "edit", "delete"], "tenant"),
    ],
    "Coordinator": [
        ("clients", ["view", "create", "edit"], "tenant"),
        ("shifts", ["view", "create", "edit", "delete"], "tenant"),
        ("staff", ["view", "edit"], "tenant"),
        ("forms", ["view", "create", "edit"], "tenant"),
        ("reports", ["view", "create", "export"], "tenant"),
        ("case-notes", ["view", "create", "edit"], "tenant"),
        ("observations", ["view", "create", "edit"], "tenant"),
        ("medications", ["view", "edit"], "tenant"),
        ("care-plans", ["view", "edit"], "tenant"),
        ("incidents", ["view", "create", "edit"], "tenant"),
        ("dashboard", ["view"], "tenant"),
        ("hour-allocations", ["view", "create", "edit", "delete"], "tenant"),
    ],
    "Admin": [
        ("*", ["*"], "tenant"),
        ("staff", ["view", "create", "edit", "delete", "reset-password"], "tenant"),
    ],
    "ConsoleManager": [
        ("*", ["*"], "global"),
        ("companies", ["view", "create", "edit", "delete"], "global"),
        ("tenants", ["view", "create", "edit", "delete"], "global"),
        ("staff", ["view", "create", "edit", "delete", "reset-password"], "global"),
    ],
}

PERMISSIONS = [
    PermissionRecord(role=role, module=module, actions=actions, scope=scope)
    for role, rows in _MATRIX.items()
    for module, actions, scope in rows
]


def default_policy() -> PolicyDocument:
    return PolicyDocument(roles=list(ROLES), permissions=list(PERMISSIONS))
