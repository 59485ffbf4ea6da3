from .base import Base
from .role import Role
from .permission import Permission
from .role_permission import RolePermission
from .role_inheritance import RoleInheritance

__all__ = [
    "Base",
    "Role",
    "Permission",
    "RolePermission",
    "RoleInheritance",
]
