"""Role-based access policy — the one table both layers read.

API_POLICY maps every protected API operation to the roles allowed to
invoke it; VIEW_POLICY maps every client-side view to the roles allowed to
see it. The server enforces API_POLICY (require_roles), the React client
fetches VIEW_POLICY from /api/auth/policy and feeds it to its route guard,
so neither side keeps a private copy of the role lists.

There is no role hierarchy: admin passes a check only where it is listed.
"""

import enum
import uuid
from typing import Iterable, Union


class Role(str, enum.Enum):
    FARMER = "farmer"
    GOVERNMENT = "government"
    ADMIN = "admin"
    ANALYST = "analyst"
    STAFF = "staff"


ALL_ROLES = frozenset(Role)

# Roles a user may pick at registration; admin and staff come from the CLI.
SELF_REGISTRATION_ROLES = frozenset({Role.FARMER, Role.GOVERNMENT, Role.ANALYST})

GOVERNMENT_PERMISSIONS = ("read", "write", "admin", "approve", "report")


class Decision(str, enum.Enum):
    PERMIT = "permit"
    DENY = "deny"


def _roles(*roles: Role) -> frozenset:
    return frozenset(roles)


API_POLICY: dict[str, frozenset] = {
    # Land
    "land.read": ALL_ROLES,
    "land.write": _roles(Role.FARMER, Role.ADMIN),
    # Farmers
    "farmers.read": ALL_ROLES,
    "farmers.update": _roles(Role.FARMER, Role.ADMIN),
    "farmers.report": _roles(Role.FARMER, Role.ADMIN),
    # Government
    "government.read": ALL_ROLES,
    "government.update": _roles(Role.GOVERNMENT, Role.ADMIN),
    "government.permissions": _roles(Role.ADMIN),
    # Users
    "users.manage": _roles(Role.ADMIN),
    # Analytics
    "analytics.read": ALL_ROLES,
    "analytics.reports": _roles(Role.ANALYST, Role.GOVERNMENT, Role.ADMIN),
    # Communication
    "messages": ALL_ROLES,
    "contacts": ALL_ROLES,
    "notifications": ALL_ROLES,
    "announcements.read": ALL_ROLES,
    "announcements.write": _roles(Role.ADMIN, Role.GOVERNMENT),
    "support.create": ALL_ROLES,
    "support.manage": _roles(Role.ADMIN, Role.STAFF),
    # Subsidies
    "subsidies.read": ALL_ROLES,
    "subsidies.write": _roles(Role.GOVERNMENT, Role.ADMIN),
    "subsidies.apply": _roles(Role.FARMER),
    "subsidies.applications": _roles(Role.FARMER, Role.GOVERNMENT, Role.ADMIN),
    "subsidies.review": _roles(Role.GOVERNMENT, Role.ADMIN),
    # Finance
    "finance": _roles(Role.FARMER),
}


VIEW_POLICY: dict[str, frozenset] = {
    "/land-mapping": _roles(Role.FARMER, Role.GOVERNMENT, Role.ADMIN),
    "/farmer-portal": _roles(Role.FARMER),
    "/farmer-dashboard": _roles(Role.FARMER),
    "/government": _roles(Role.GOVERNMENT, Role.ADMIN),
    "/government-dashboard": _roles(Role.GOVERNMENT),
    "/government-portal": _roles(Role.GOVERNMENT),
    "/analyst-dashboard": _roles(Role.ANALYST),
    "/analyst-portal": _roles(Role.ANALYST),
    "/admin-dashboard": _roles(Role.ADMIN),
    "/admin-portal": _roles(Role.ADMIN),
    "/analytics": _roles(Role.ANALYST, Role.GOVERNMENT, Role.ADMIN, Role.FARMER),
    "/communication": _roles(Role.FARMER, Role.GOVERNMENT, Role.ADMIN, Role.ANALYST),
    "/admin-support": _roles(Role.ADMIN, Role.STAFF),
}


def authorize(role: Union[str, Role, None], allowed_roles: Iterable) -> Decision:
    """Pure permit/deny decision: DENY iff role is not in allowed_roles."""
    allowed = {Role(r).value for r in allowed_roles}
    if role is None:
        return Decision.DENY
    value = role.value if isinstance(role, Role) else str(role)
    return Decision.PERMIT if value in allowed else Decision.DENY


def can_mutate(
    user_id: Union[str, uuid.UUID, None],
    role: Union[str, Role, None],
    owner_id: Union[str, uuid.UUID, None],
) -> bool:
    """Owner-or-admin rule for resource-scoped writes."""
    if authorize(role, [Role.ADMIN]) is Decision.PERMIT:
        return True
    if user_id is None or owner_id is None:
        return False
    return str(user_id) == str(owner_id)


def serialize_policy(policy: dict[str, frozenset]) -> dict[str, list[str]]:
    """Policy table as JSON-friendly {key: [role, ...]} with stable ordering."""
    return {
        key: sorted(Role(r).value for r in roles)
        for key, roles in sorted(policy.items())
    }
