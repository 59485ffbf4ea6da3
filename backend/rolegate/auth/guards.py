"""
Route and service-level permission enforcement.

Every guard re-checks on the server. Hiding a control in the UI is cosmetic;
a caller that reaches the route or the service function directly without the
permission is still rejected here.
"""
from __future__ import annotations

import functools
import inspect
import logging
from typing import Callable

from fastapi import Depends, Request

from ..dependencies import get_permission_checker
from ..errors import PermissionError
from .checker import PermissionChecker

logger = logging.getLogger("rolegate.rbac")


def _log_deny(
    request: Request | None,
    checker: PermissionChecker,
    required: tuple[str, ...],
) -> None:
    principal = checker.principal
    method = request.method if request is not None else "-"
    path = request.url.path if request is not None else "-"
    logger.warning(
        "Permission denied principal=%s role=%s required=%s method=%s path=%s",
        principal.id if principal is not None else None,
        checker.role,
        ",".join(required),
        method,
        path,
    )


def require_permission(permission: str) -> Callable:
    """Dependency enforcing a single permission (403 if missing)."""

    async def dependency(
        request: Request,
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> PermissionChecker:
        if not checker.has_permission(permission):
            _log_deny(request, checker, (permission,))
            raise PermissionError.missing((permission,))
        return checker

    return dependency


def require_any_permission(*permissions: str) -> Callable:
    """Dependency passing when the caller holds at least one of ``permissions``."""

    async def dependency(
        request: Request,
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> PermissionChecker:
        if not checker.has_any_permission(permissions):
            _log_deny(request, checker, permissions)
            raise PermissionError.missing(permissions)
        return checker

    return dependency


def require_all_permissions(*permissions: str) -> Callable:
    """Dependency passing only when the caller holds every one of ``permissions``."""

    async def dependency(
        request: Request,
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> PermissionChecker:
        if not checker.has_all_permissions(permissions):
            _log_deny(request, checker, permissions)
            raise PermissionError.missing(permissions, all_required=True)
        return checker

    return dependency


def require_role(*roles: str) -> Callable:
    async def dependency(
        request: Request,
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> PermissionChecker:
        if not checker.has_any_role(roles):
            required = tuple(f"role:{role}" for role in roles)
            _log_deny(request, checker, required)
            raise PermissionError(
                "Insufficient role", details={"required_roles": list(roles)}
            )
        return checker

    return dependency


def require_admin() -> Callable:
    async def dependency(
        request: Request,
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> PermissionChecker:
        if not checker.is_admin():
            _log_deny(request, checker, ("role:admin",))
            raise PermissionError("Administrator role required")
        return checker

    return dependency


def require_super_admin() -> Callable:
    async def dependency(
        request: Request,
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> PermissionChecker:
        if not checker.is_super_admin():
            _log_deny(request, checker, ("role:super_admin",))
            raise PermissionError("Super administrator role required")
        return checker

    return dependency


def permission_required(permission: str) -> Callable:
    """Decorator for service functions that take a ``checker`` keyword argument.

    Works for plain and async functions. Raises PermissionError before the
    wrapped function runs when the checker lacks ``permission``.
    """

    def decorator(func: Callable) -> Callable:
        def _check(kwargs: dict) -> None:
            checker = kwargs.get("checker")
            if not isinstance(checker, PermissionChecker):
                raise TypeError(
                    f"{func.__qualname__} must be called with a PermissionChecker "
                    "as the 'checker' keyword argument"
                )
            if not checker.has_permission(permission):
                _log_deny(None, checker, (permission,))
                raise PermissionError.missing((permission,))

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                _check(kwargs)
                return await func(*args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _check(kwargs)
            return func(*args, **kwargs)

        return wrapper

    return decorator
