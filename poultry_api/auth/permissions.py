"""Role capability sets.

Roles are fixed (admin, farm_owner, worker).  Each capability maps to the
frozenset of roles allowed to exercise it; routers gate on these through
`require_role(*roles)`.

Capability naming: `<resource>.<action>`
"""

from __future__ import annotations

from poultry_api.models.user import UserRole

ALL_ROLES: frozenset[UserRole] = frozenset(UserRole)

# Roles that skip the per-farm ownership check
OWNERSHIP_BYPASS_ROLES: frozenset[UserRole] = frozenset({UserRole.ADMIN})

CAPABILITIES: dict[str, frozenset[UserRole]] = {
    "users.list": frozenset({UserRole.ADMIN}),
    "breeds.read": ALL_ROLES,
    "breeds.write": frozenset({UserRole.ADMIN}),
    "farms.create": ALL_ROLES,
}


def roles_for(capability: str) -> frozenset[UserRole]:
    """Return the roles holding a capability (empty set if unknown)."""
    return CAPABILITIES.get(capability, frozenset())


def has_role(role: UserRole | str, allowed: frozenset[UserRole]) -> bool:
    try:
        return UserRole(role) in allowed
    except ValueError:
        return False


def bypasses_ownership(role: UserRole | str) -> bool:
    return has_role(role, OWNERSHIP_BYPASS_ROLES)
