"""
Built-in role/permission contract for the admin dashboard.

This module is the default source of the role catalog:
- Seven role tiers, ranked from Officer (1) to Super Admin (7)
- Explicit ``resource.action`` permissions, grouped by resource family
- Base permissions per role (without inheritance)
- Pre-flattened inheritance lists (each role lists ALL of its ancestors)

Wildcard permissions are forbidden. Every permission must be explicit.
The tables are validated at import time (fail-fast).
"""
from __future__ import annotations

from enum import Enum
from typing import Final


# ============================================================================
# ROLES
# ============================================================================

class Role(str, Enum):
    """Role tiers of the dashboard. Names are the stored role identifiers."""
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    STAKEHOLDER = "Stakeholder"
    MANAGEMENT = "Management"
    MANAGER = "Manager"
    LEADER = "Leader"
    OFFICER = "Officer"


ALL_ROLES: Final[frozenset[str]] = frozenset(role.value for role in Role)


# ============================================================================
# PERMISSIONS - EXPLICIT ONLY, NO WILDCARDS
# ============================================================================

# FORBIDDEN: "admin:*", "content.*" or any other pattern ending in "*"

USER_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "user.create",
    "user.read",
    "user.update",
    "user.delete",
    "user.manage",
    "user.view_all",
    "user.invite",
    "user.activate",
    "user.deactivate",
    "user.reset_password",
})

ROLE_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "role.create",
    "role.read",
    "role.update",
    "role.delete",
    "role.manage",
    "role.assign",
})

CONTENT_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "content.create",
    "content.read",
    "content.update",
    "content.delete",
    "content.publish",
    "content.archive",
    "content.restore",
    "content.view_all",
    "content.manage",
})

CATEGORY_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "category.create",
    "category.read",
    "category.update",
    "category.delete",
    "category.manage",
})

DASHBOARD_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "dashboard.create",
    "dashboard.read",
    "dashboard.update",
    "dashboard.delete",
    "dashboard.manage",
    "dashboard.view_all",
    "dashboard.share",
})

ANALYTICS_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "analytics.create",
    "analytics.read",
    "analytics.update",
    "analytics.delete",
})

FILE_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "file.upload",
    "file.read",
    "file.update",
    "file.delete",
    "file.manage",
    "file.view_all",
})

MENU_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "menu.create",
    "menu.read",
    "menu.update",
    "menu.delete",
})

SETTING_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "setting.read",
    "setting.update",
    "setting.manage",
})

AUDIT_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "audit.read",
    "audit.export",
})

SYSTEM_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "system.admin",
    "system.maintenance",
    "system.backup",
    "system.restore",
})

ALL_PERMISSIONS: Final[frozenset[str]] = (
    USER_PERMISSIONS
    | ROLE_PERMISSIONS
    | CONTENT_PERMISSIONS
    | CATEGORY_PERMISSIONS
    | DASHBOARD_PERMISSIONS
    | ANALYTICS_PERMISSIONS
    | FILE_PERMISSIONS
    | MENU_PERMISSIONS
    | SETTING_PERMISSIONS
    | AUDIT_PERMISSIONS
    | SYSTEM_PERMISSIONS
)


# Permission groups for easier management
PERMISSION_GROUPS: Final[dict[str, frozenset[str]]] = {
    "user_management": frozenset({
        "user.create", "user.read", "user.update", "user.delete", "user.manage",
    }),
    "role_management": frozenset({
        "role.create", "role.read", "role.update", "role.delete", "role.manage",
    }),
    "content_management": frozenset({
        "content.create",
        "content.read",
        "content.update",
        "content.delete",
        "content.publish",
        "content.manage",
    }),
    "dashboard_management": frozenset({
        "dashboard.create",
        "dashboard.read",
        "dashboard.update",
        "dashboard.delete",
        "dashboard.manage",
    }),
    "file_management": frozenset({
        "file.upload", "file.read", "file.update", "file.delete", "file.manage",
    }),
    "system_administration": frozenset({
        "setting.manage", "audit.read", "system.admin", "system.maintenance",
    }),
}


# ============================================================================
# ROLE CATALOG TABLES
# ============================================================================

# Higher number = higher privilege
ROLE_HIERARCHY: Final[dict[str, int]] = {
    Role.OFFICER.value: 1,
    Role.LEADER.value: 2,
    Role.MANAGER.value: 3,
    Role.MANAGEMENT.value: 4,
    Role.STAKEHOLDER.value: 5,
    Role.ADMIN.value: 6,
    Role.SUPER_ADMIN.value: 7,
}

# Pre-flattened: each role lists every role it inherits from, not only parents
ROLE_INHERITANCE: Final[dict[str, tuple[str, ...]]] = {
    Role.SUPER_ADMIN.value: (
        Role.ADMIN.value,
        Role.STAKEHOLDER.value,
        Role.MANAGEMENT.value,
        Role.MANAGER.value,
        Role.LEADER.value,
        Role.OFFICER.value,
    ),
    Role.ADMIN.value: (
        Role.STAKEHOLDER.value,
        Role.MANAGEMENT.value,
        Role.MANAGER.value,
        Role.LEADER.value,
        Role.OFFICER.value,
    ),
    Role.STAKEHOLDER.value: (
        Role.MANAGEMENT.value,
        Role.MANAGER.value,
        Role.LEADER.value,
        Role.OFFICER.value,
    ),
    Role.MANAGEMENT.value: (
        Role.MANAGER.value,
        Role.LEADER.value,
        Role.OFFICER.value,
    ),
    Role.MANAGER.value: (
        Role.LEADER.value,
        Role.OFFICER.value,
    ),
    Role.LEADER.value: (
        Role.OFFICER.value,
    ),
    Role.OFFICER.value: (),
}

# Base permissions for each role (without inheritance)
BASE_ROLE_PERMISSIONS: Final[dict[str, frozenset[str]]] = {
    # Super admin has every permission
    Role.SUPER_ADMIN.value: ALL_PERMISSIONS,

    Role.ADMIN.value: frozenset({
        *PERMISSION_GROUPS["user_management"],
        *PERMISSION_GROUPS["role_management"],
        "role.assign",
        *PERMISSION_GROUPS["content_management"],
        "dashboard.create",
        "dashboard.read",
        "dashboard.update",
        "dashboard.delete",
        "analytics.read",
        "analytics.create",
        "analytics.update",
        "analytics.delete",
        "setting.read",
        "setting.update",
        "audit.read",
        "menu.read",
        "menu.create",
        "menu.update",
        "menu.delete",
    }),

    Role.STAKEHOLDER.value: frozenset({
        "user.read",
        "role.read",
        *PERMISSION_GROUPS["content_management"],
        "dashboard.create",
        "dashboard.read",
        "dashboard.update",
        "dashboard.delete",
        "analytics.read",
        "analytics.create",
        "analytics.update",
        "setting.read",
        "audit.read",
    }),

    Role.MANAGEMENT.value: frozenset({
        "user.read",
        "content.create",
        "content.read",
        "content.update",
        "content.delete",
        "dashboard.create",
        "dashboard.read",
        "dashboard.update",
        "analytics.read",
        "analytics.create",
        "analytics.update",
    }),

    Role.MANAGER.value: frozenset({
        "user.read",
        "content.create",
        "content.read",
        "content.update",
        "dashboard.create",
        "dashboard.read",
        "dashboard.update",
        "analytics.read",
        "analytics.create",
    }),

    Role.LEADER.value: frozenset({
        "content.read",
        "content.update",
        "dashboard.read",
        "dashboard.update",
        "analytics.read",
    }),

    Role.OFFICER.value: frozenset({
        "content.read",
        "dashboard.read",
        "analytics.read",
    }),
}

ROLE_DISPLAY_INFO: Final[dict[str, dict[str, str]]] = {
    Role.SUPER_ADMIN.value: {
        "name": "Super Administrator",
        "description": "Full system access with all permissions",
        "color": "red",
        "icon": "mdi:shield-crown",
    },
    Role.ADMIN.value: {
        "name": "Administrator",
        "description": "System administration and user management",
        "color": "orange",
        "icon": "mdi:shield-account",
    },
    Role.STAKEHOLDER.value: {
        "name": "Stakeholder",
        "description": "High-level access to analytics and content",
        "color": "purple",
        "icon": "mdi:account-star",
    },
    Role.MANAGEMENT.value: {
        "name": "Management",
        "description": "Content and analytics management",
        "color": "blue",
        "icon": "mdi:account-tie",
    },
    Role.MANAGER.value: {
        "name": "Manager",
        "description": "Team and content management",
        "color": "green",
        "icon": "mdi:account-supervisor",
    },
    Role.LEADER.value: {
        "name": "Leader",
        "description": "Team leadership and content access",
        "color": "yellow",
        "icon": "mdi:account-group",
    },
    Role.OFFICER.value: {
        "name": "Officer",
        "description": "Basic content and dashboard access",
        "color": "gray",
        "icon": "mdi:account",
    },
}


# ============================================================================
# VALIDATION
# ============================================================================

def is_wildcard(permission: str) -> bool:
    return permission.endswith("*")


def validate_permission(permission: str) -> None:
    """
    Validate that a permission is explicit and known.

    Args:
        permission: The permission to validate

    Raises:
        ValueError: If permission contains wildcards or is not in the contract
    """
    if is_wildcard(permission):
        raise ValueError(
            f"Wildcard permission '{permission}' is forbidden. "
            "All permissions must be explicit."
        )

    if permission not in ALL_PERMISSIONS:
        raise ValueError(f"Invalid permission '{permission}'")


def _validate_contract() -> None:
    """Validate the built-in tables at module import time."""
    errors = []

    for table_name, table in (
        ("ROLE_HIERARCHY", ROLE_HIERARCHY),
        ("ROLE_INHERITANCE", ROLE_INHERITANCE),
        ("BASE_ROLE_PERMISSIONS", BASE_ROLE_PERMISSIONS),
    ):
        if set(table) != ALL_ROLES:
            errors.append(f"{table_name} does not cover exactly the defined roles")

    for role, permissions in BASE_ROLE_PERMISSIONS.items():
        for permission in permissions:
            try:
                validate_permission(permission)
            except ValueError as e:
                errors.append(f"Role '{role}' has invalid permission: {e}")

    for role, ancestors in ROLE_INHERITANCE.items():
        for ancestor in ancestors:
            if ROLE_HIERARCHY.get(ancestor, 0) >= ROLE_HIERARCHY.get(role, 0):
                errors.append(
                    f"Role '{role}' inherits from '{ancestor}' which is not lower-ranked"
                )

    for group, permissions in PERMISSION_GROUPS.items():
        unknown = permissions - ALL_PERMISSIONS
        if unknown:
            errors.append(f"Permission group '{group}' has unknown permissions: {sorted(unknown)}")

    if errors:
        raise RuntimeError(
            "Role contract validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


_validate_contract()
