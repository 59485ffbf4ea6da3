from fastapi import Depends, Request

from .auth.checker import PermissionChecker, Principal
from .auth.engine import AuthorizationEngine
from .auth.provider import EngineProvider
from .errors import AuthError, CatalogUnavailableError, ConfigurationError


def get_engine_provider(request: Request) -> EngineProvider:
    return request.app.state.engine_provider


def get_engine(
    provider: EngineProvider = Depends(get_engine_provider),
) -> AuthorizationEngine:
    try:
        return provider.get()
    except ConfigurationError as exc:
        # /health reports the same condition as 503.
        raise CatalogUnavailableError() from exc


async def get_current_principal(request: Request) -> Principal:
    # The identity layer in front of this service authenticates the caller
    # and stores the resulting Principal on request.state.
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise AuthError("Not authenticated")
    if not principal.is_active:
        raise AuthError("Account is inactive")
    return principal


async def get_permission_checker(
    engine: AuthorizationEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal),
) -> PermissionChecker:
    return PermissionChecker(engine, principal)
