from fastapi import APIRouter, Depends

from ..auth.checker import PermissionChecker
from ..auth.engine import AuthorizationEngine
from ..auth.guards import require_permission
from ..dependencies import get_engine, get_permission_checker
from ..errors import NotFoundError
from ..schemas.catalog import (
    RoleAssignmentRequest,
    RoleAssignmentResponse,
    RoleDisplay,
    RolePermissionsResponse,
    RoleResponse,
)

router = APIRouter(prefix="/roles", tags=["roles"])


def _role_response(engine: AuthorizationEngine, role: str) -> RoleResponse:
    info = engine.get_role_display_info(role)
    return RoleResponse(
        name=role,
        rank=engine.get_role_level(role),
        display=RoleDisplay(
            name=info.name,
            description=info.description,
            color=info.color,
            icon=info.icon,
        ),
    )


@router.get(
    "",
    response_model=list[RoleResponse],
    dependencies=[Depends(require_permission("role.read"))],
)
async def list_roles(
    engine: AuthorizationEngine = Depends(get_engine),
) -> list[RoleResponse]:
    return [_role_response(engine, role) for role in engine.roles]


@router.get("/manageable", response_model=list[RoleResponse])
async def list_manageable_roles(
    checker: PermissionChecker = Depends(get_permission_checker),
) -> list[RoleResponse]:
    engine = checker.engine
    manageable = engine.get_manageable_roles(checker.role)
    return [_role_response(engine, role) for role in engine.roles if role in manageable]


@router.get(
    "/{role}/permissions",
    response_model=RolePermissionsResponse,
    dependencies=[Depends(require_permission("role.read"))],
)
async def get_role_permissions(
    role: str,
    engine: AuthorizationEngine = Depends(get_engine),
) -> RolePermissionsResponse:
    if role not in engine.catalog:
        raise NotFoundError(f"Role '{role}' not found")
    return RolePermissionsResponse(
        role=role, permissions=sorted(engine.get_role_permissions(role))
    )


@router.post("/assignments/validate", response_model=RoleAssignmentResponse)
async def validate_role_assignment(
    payload: RoleAssignmentRequest,
    checker: PermissionChecker = Depends(require_permission("role.assign")),
) -> RoleAssignmentResponse:
    return RoleAssignmentResponse(
        assigner_role=checker.role,
        target_role=payload.target_role,
        allowed=checker.can_assign_role(payload.target_role),
    )
