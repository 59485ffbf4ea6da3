from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ..auth.catalog import InheritanceMode, RoleCatalog, RoleDisplayInfo
from ..auth.constants import Role as BuiltinRole
from ..models.permission import Permission
from ..models.role import Role
from ..models.role_inheritance import RoleInheritance
from ..models.role_permission import RolePermission


class RoleCatalogRepository:
    """Reads the role catalog tables and builds a RoleCatalog.

    Inactive roles are left out of the catalog, together with their grants
    and every inheritance link that points at them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_active_roles(self) -> list[Role]:
        result = await self.session.execute(
            select(Role).where(Role.is_active).order_by(Role.rank)
        )
        return list(result.scalars().all())

    async def list_role_grants(self) -> list[tuple[str, str]]:
        result = await self.session.execute(
            select(Role.name, Permission.name)
            .join(RolePermission, RolePermission.role_id == Role.id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(Role.is_active)
        )
        return [(role_name, permission_name) for role_name, permission_name in result.all()]

    async def list_inheritance_links(self) -> list[tuple[str, str]]:
        parent = aliased(Role)
        result = await self.session.execute(
            select(Role.name, parent.name)
            .join(RoleInheritance, RoleInheritance.role_id == Role.id)
            .join(parent, parent.id == RoleInheritance.parent_role_id)
            .where(Role.is_active)
            .where(parent.is_active)
        )
        return [(role_name, parent_name) for role_name, parent_name in result.all()]

    async def load_catalog(
        self,
        *,
        inheritance: InheritanceMode = "flattened",
        super_admin_role: str | None = BuiltinRole.SUPER_ADMIN.value,
        admin_role: str | None = BuiltinRole.ADMIN.value,
        validate_acyclic: bool = True,
        enforce_unique_ranks: bool = True,
    ) -> RoleCatalog:
        roles = await self.list_active_roles()
        grants = await self.list_role_grants()
        links = await self.list_inheritance_links()

        base_permissions: dict[str, set[str]] = {role.name: set() for role in roles}
        for role_name, permission_name in grants:
            base_permissions.setdefault(role_name, set()).add(permission_name)

        inherits_from: dict[str, set[str]] = {}
        for role_name, parent_name in links:
            inherits_from.setdefault(role_name, set()).add(parent_name)

        ranked = {role.name for role in roles}
        return RoleCatalog.build(
            {role.name: role.rank for role in roles},
            base_permissions,
            inherits_from,
            inheritance=inheritance,
            super_admin_role=super_admin_role if super_admin_role in ranked else None,
            admin_role=admin_role if admin_role in ranked else None,
            display_info={
                role.name: RoleDisplayInfo(
                    name=role.display_name,
                    description=role.description or "",
                    color=role.color or "gray",
                    icon=role.icon or "mdi:account",
                )
                for role in roles
            },
            validate_acyclic=validate_acyclic,
            enforce_unique_ranks=enforce_unique_ranks,
        )
