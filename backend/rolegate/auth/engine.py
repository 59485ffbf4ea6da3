"""
Authorization engine - effective permissions and role comparisons.

Every query is total and fails closed: an unknown role has rank 0, no
permissions, manages nothing and cannot assign anything. Nothing here
raises for unknown roles or permissions; a denied check returns False and
the caller decides how to respond.

The engine only reads from an immutable RoleCatalog, so one instance can be
shared by any number of threads or tasks without locking.
"""
from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from .catalog import RoleCatalog, RoleDisplayInfo

Role = str
Permission = str

_NO_PERMISSIONS: frozenset[Permission] = frozenset()


class AuthorizationEngine:
    def __init__(self, catalog: RoleCatalog):
        self._catalog = catalog
        # Effective sets are fixed for the catalog's lifetime.
        self._effective = MappingProxyType({
            role: catalog.base_permissions.get(role, _NO_PERMISSIONS).union(
                *(
                    catalog.base_permissions.get(ancestor, _NO_PERMISSIONS)
                    for ancestor in catalog.inherits_from.get(role, ())
                )
            )
            for role in catalog.ranks
        })
        self._roles = catalog.roles

    @property
    def catalog(self) -> RoleCatalog:
        return self._catalog

    @property
    def roles(self) -> tuple[Role, ...]:
        """Catalog roles ordered by rank, least privileged first."""
        return self._roles

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    def get_role_permissions(self, role: Role | None) -> frozenset[Permission]:
        """Own plus inherited permissions of a role; empty for unknown roles."""
        return self._effective.get(role, _NO_PERMISSIONS)

    def get_effective_permissions(
        self,
        role: Role | None,
        additional_permissions: Iterable[Permission] = (),
    ) -> frozenset[Permission]:
        """Role permissions plus grants made directly to a principal."""
        return self.get_role_permissions(role).union(additional_permissions)

    def has_permission(self, role: Role | None, permission: Permission) -> bool:
        return permission in self.get_role_permissions(role)

    def has_any_permission(self, role: Role | None, permissions: Iterable[Permission]) -> bool:
        granted = self.get_role_permissions(role)
        return any(permission in granted for permission in permissions)

    def has_all_permissions(self, role: Role | None, permissions: Iterable[Permission]) -> bool:
        granted = self.get_role_permissions(role)
        return all(permission in granted for permission in permissions)

    def role_inherits_from(self, child_role: Role | None, parent_role: Role | None) -> bool:
        return parent_role in self._catalog.inherits_from.get(child_role, ())

    # ------------------------------------------------------------------
    # Ranks
    # ------------------------------------------------------------------

    def get_role_level(self, role: Role | None) -> int:
        """Rank of a role; unknown roles rank 0, below every catalog role."""
        return self._catalog.ranks.get(role, 0)

    def is_higher_role(self, role_a: Role | None, role_b: Role | None) -> bool:
        return self.get_role_level(role_a) > self.get_role_level(role_b)

    def is_equal_or_higher_role(self, role_a: Role | None, role_b: Role | None) -> bool:
        # Two unknown roles both rank 0 and therefore compare as equal here.
        return self.get_role_level(role_a) >= self.get_role_level(role_b)

    def can_manage_role(self, manager_role: Role | None, target_role: Role | None) -> bool:
        """A role manages only strictly lower-ranked roles, never peers."""
        return self.is_higher_role(manager_role, target_role)

    def get_manageable_roles(self, role: Role | None) -> frozenset[Role]:
        level = self.get_role_level(role)
        return frozenset(r for r in self._roles if self._catalog.ranks[r] < level)

    def get_manager_roles(self, role: Role | None) -> frozenset[Role]:
        level = self.get_role_level(role)
        return frozenset(r for r in self._roles if self._catalog.ranks[r] > level)

    def validate_role_assignment(
        self,
        assigner_role: Role | None,
        target_role: Role | None,
    ) -> bool:
        """Decide whether ``assigner_role`` may grant ``target_role`` to someone.

        Precedence:
        1. The super-admin role may assign any role, including its own.
        2. The admin role may assign any role except the super-admin role.
        3. Any other role may assign only strictly lower-ranked roles.

        Rules 1 and 2 are identity checks against the catalog's sentinel roles,
        not rank checks. Unknown assigners never pass rule 3 because they rank 0.
        """
        catalog = self._catalog
        if assigner_role is None:
            return False
        if catalog.super_admin_role is not None and assigner_role == catalog.super_admin_role:
            return True
        if catalog.admin_role is not None and assigner_role == catalog.admin_role:
            return target_role != catalog.super_admin_role
        return self.can_manage_role(assigner_role, target_role)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def get_role_display_info(self, role: Role) -> RoleDisplayInfo:
        info = self._catalog.display_info.get(role)
        if info is not None:
            return info
        return RoleDisplayInfo(name=role, description="Custom role")
