"""Per-principal authorization predicates built on the engine."""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from .engine import AuthorizationEngine

# Bulk operations and the permission each one needs, on top of admin status
BULK_OPERATION_PERMISSIONS: dict[str, str] = {
    "delete_users": "user.delete",
    "delete_content": "content.delete",
    "export_data": "audit.export",
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as supplied by the identity layer."""

    id: uuid.UUID | str
    role: str | None
    is_active: bool = True
    extra_permissions: frozenset[str] = field(default_factory=frozenset)


class PermissionChecker:
    """Answer authorization questions for one principal.

    A missing or inactive principal, or one without a role, holds no
    permissions and no roles.
    """

    def __init__(self, engine: AuthorizationEngine, principal: Principal | None):
        self.engine = engine
        self.principal = principal
        if principal is None or not principal.is_active or principal.role is None:
            self._permissions: frozenset[str] = frozenset()
        else:
            self._permissions = engine.get_effective_permissions(
                principal.role, principal.extra_permissions
            )

    @property
    def role(self) -> str | None:
        if self.principal is None or not self.principal.is_active:
            return None
        return self.principal.role

    def has_permission(self, permission: str) -> bool:
        return permission in self._permissions

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return any(self.has_permission(permission) for permission in permissions)

    def has_all_permissions(self, permissions: Iterable[str]) -> bool:
        return all(self.has_permission(permission) for permission in permissions)

    def has_role(self, role_name: str) -> bool:
        return self.role is not None and self.role == role_name

    def has_any_role(self, role_names: Iterable[str]) -> bool:
        return any(self.has_role(role_name) for role_name in role_names)

    def is_super_admin(self) -> bool:
        sentinel = self.engine.catalog.super_admin_role
        return sentinel is not None and self.has_role(sentinel)

    def is_admin(self) -> bool:
        sentinel = self.engine.catalog.admin_role
        return self.is_super_admin() or (sentinel is not None and self.has_role(sentinel))

    def can_manage_users(self) -> bool:
        return self.has_permission("user.manage")

    def can_manage_roles(self) -> bool:
        return self.has_permission("role.manage")

    def can_manage_content(self) -> bool:
        return self.has_permission("content.manage")

    def can_manage_settings(self) -> bool:
        return self.has_permission("setting.manage")

    def can_access_admin(self) -> bool:
        return self.is_admin() or self.has_any_permission(
            ("user.manage", "role.manage", "content.manage", "setting.manage")
        )

    def can_perform_action(self, resource: str, action: str) -> bool:
        return self.has_permission(f"{resource}.{action}")

    def owns_resource(self, resource_owner_id: uuid.UUID | str | None) -> bool:
        if self.principal is None or not self.principal.is_active or resource_owner_id is None:
            return False
        return str(self.principal.id) == str(resource_owner_id)

    def can_access_resource(
        self, resource_owner_id: uuid.UUID | str | None, permission: str
    ) -> bool:
        return self.owns_resource(resource_owner_id) or self.has_permission(permission)

    def can_assign_role(self, target_role: str) -> bool:
        """Role-assignment decision; roles outside the catalog are never assignable."""
        if self.role is None or target_role not in self.engine.catalog:
            return False
        return self.engine.validate_role_assignment(self.role, target_role)

    def can_manage_principal(self, other: Principal) -> bool:
        if self.role is None:
            return False
        return self.engine.can_manage_role(self.role, other.role)

    def can_perform_bulk_operation(self, operation: str) -> bool:
        if not self.is_admin():
            return False
        permission = BULK_OPERATION_PERMISSIONS.get(operation)
        return permission is not None and self.has_permission(permission)

    def get_all_permissions(self) -> list[str]:
        return sorted(self._permissions)

    def get_user_role(self) -> str | None:
        return self.role
