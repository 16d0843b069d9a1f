"""
Role capabilities.

One static table decides what each role may do. Navigation links, page
controls and API endpoints all consult it, so a role never sees a control
that the backend would refuse.
"""

from enum import Enum

from sweetswirls.models.user import UserRole


class Capability(str, Enum):
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_INVENTORY = "MANAGE_INVENTORY"
    DELETE_INVENTORY = "DELETE_INVENTORY"
    MANAGE_PRODUCTION = "MANAGE_PRODUCTION"
    CREATE_PRODUCTION_REQUESTS = "CREATE_PRODUCTION_REQUESTS"
    RECORD_BATCHES = "RECORD_BATCHES"
    RECORD_WASTE = "RECORD_WASTE"
    VIEW_REPORTS = "VIEW_REPORTS"
    TAKE_INVENTORY = "TAKE_INVENTORY"
    VIEW_INVENTORY = "VIEW_INVENTORY"
    VIEW_PRODUCTION = "VIEW_PRODUCTION"


ALL_ROLES = frozenset(UserRole)
LEADS = frozenset({UserRole.ADMIN, UserRole.PRODUCTION_LEAD, UserRole.SHIFT_LEAD})
PRODUCTION = frozenset({UserRole.ADMIN, UserRole.PRODUCTION_LEAD})

CAPABILITY_ROLES: dict[Capability, frozenset[UserRole]] = {
    Capability.MANAGE_USERS: frozenset({UserRole.ADMIN}),
    Capability.MANAGE_INVENTORY: LEADS,
    Capability.DELETE_INVENTORY: frozenset({UserRole.ADMIN}),
    Capability.MANAGE_PRODUCTION: PRODUCTION,
    Capability.CREATE_PRODUCTION_REQUESTS: LEADS,
    Capability.RECORD_BATCHES: PRODUCTION,
    Capability.RECORD_WASTE: LEADS,
    Capability.VIEW_REPORTS: LEADS,
    Capability.TAKE_INVENTORY: LEADS,
    Capability.VIEW_INVENTORY: ALL_ROLES,
    Capability.VIEW_PRODUCTION: ALL_ROLES,
}


def can(role: UserRole | str | None, capability: Capability) -> bool:
    if role is None:
        return False
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return role in CAPABILITY_ROLES[capability]


def capabilities_for(role: UserRole | str | None) -> set[Capability]:
    return {cap for cap in Capability if can(role, cap)}
