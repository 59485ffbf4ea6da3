from fastapi import APIRouter, Depends

from ..auth.checker import PermissionChecker
from ..dependencies import get_permission_checker
from ..schemas.catalog import PrincipalPermissionsResponse

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/permissions", response_model=PrincipalPermissionsResponse)
async def get_my_permissions(
    checker: PermissionChecker = Depends(get_permission_checker),
) -> PrincipalPermissionsResponse:
    return PrincipalPermissionsResponse(
        role=checker.get_user_role(), permissions=checker.get_all_permissions()
    )
