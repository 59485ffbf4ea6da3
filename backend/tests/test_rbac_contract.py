"""Tests for the built-in role/permission contract."""
import pytest

from rolegate.auth import constants
from rolegate.auth.constants import (
    ALL_PERMISSIONS,
    BASE_ROLE_PERMISSIONS,
    ROLE_HIERARCHY,
    Role,
    is_wildcard,
    validate_permission,
)


def test_contract_has_no_membership_helpers():
    assert not hasattr(constants, "is_valid_permission")
    assert not hasattr(constants, "is_valid_role")


@pytest.mark.parametrize("permission", ["admin:*", "content.*", "*"])
def test_wildcards_are_rejected(permission):
    assert is_wildcard(permission) is True
    with pytest.raises(ValueError, match="forbidden"):
        validate_permission(permission)


def test_unknown_permission_is_rejected():
    with pytest.raises(ValueError, match="Invalid permission 'content.teleport'"):
        validate_permission("content.teleport")


def test_every_granted_permission_is_known():
    for role, permissions in BASE_ROLE_PERMISSIONS.items():
        for permission in permissions:
            validate_permission(permission)
        assert role in ROLE_HIERARCHY


def test_super_admin_holds_every_permission():
    assert BASE_ROLE_PERMISSIONS[Role.SUPER_ADMIN.value] == ALL_PERMISSIONS
