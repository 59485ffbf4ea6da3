"""
Tests for RoleCatalogRepository.

The session is mocked; each execute() call returns the rows of one query in
the order the repository issues them: roles, grants, inheritance links.
"""
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from rolegate.crud.role_catalog import RoleCatalogRepository
from rolegate.errors import ConfigurationError
from rolegate.models.role import Role


def make_role(name: str, rank: int, **kwargs) -> Role:
    return Role(
        id=uuid.uuid4(),
        name=name,
        rank=rank,
        display_name=kwargs.get("display_name", name),
        description=kwargs.get("description"),
        color=kwargs.get("color"),
        icon=kwargs.get("icon"),
        is_active=True,
    )


def scalars_result(items):
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    return result


def rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


def make_session(roles, grants, links):
    session = MagicMock()
    session.execute = AsyncMock(
        side_effect=[scalars_result(roles), rows_result(grants), rows_result(links)]
    )
    return session


@pytest.fixture
def roles():
    return [
        make_role("Officer", 1),
        make_role("Leader", 2),
        make_role("Admin", 6, display_name="Administrator", color="orange"),
        make_role("Super Admin", 7),
    ]


class TestLoadCatalog:
    @pytest.mark.anyio
    async def test_builds_catalog_from_rows(self, roles):
        session = make_session(
            roles,
            grants=[
                ("Officer", "content.read"),
                ("Leader", "content.update"),
                ("Admin", "user.manage"),
            ],
            links=[("Leader", "Officer"), ("Admin", "Leader")],
        )

        catalog = await RoleCatalogRepository(session).load_catalog(inheritance="direct")

        assert catalog.roles == ("Officer", "Leader", "Admin", "Super Admin")
        assert catalog.base_permissions["Leader"] == {"content.update"}
        assert catalog.base_permissions["Super Admin"] == frozenset()
        assert catalog.inherits_from["Admin"] == {"Leader", "Officer"}
        assert catalog.super_admin_role == "Super Admin"
        assert catalog.admin_role == "Admin"
        assert catalog.display_info["Admin"].name == "Administrator"
        assert catalog.display_info["Admin"].color == "orange"
        assert catalog.display_info["Officer"].icon == "mdi:account"
        assert session.execute.await_count == 3

    @pytest.mark.anyio
    async def test_missing_sentinel_roles_are_dropped(self):
        session = make_session([make_role("Officer", 1)], grants=[], links=[])

        catalog = await RoleCatalogRepository(session).load_catalog()

        assert catalog.super_admin_role is None
        assert catalog.admin_role is None

    @pytest.mark.anyio
    async def test_duplicate_ranks_fail(self):
        session = make_session(
            [make_role("Officer", 1), make_role("Trainee", 1)], grants=[], links=[]
        )

        with pytest.raises(ConfigurationError, match="Rank 1 is shared"):
            await RoleCatalogRepository(session).load_catalog()

    @pytest.mark.anyio
    async def test_cycle_in_rows_fails(self, roles):
        session = make_session(
            roles,
            grants=[],
            links=[("Leader", "Officer"), ("Officer", "Leader")],
        )

        with pytest.raises(ConfigurationError, match="cycle"):
            await RoleCatalogRepository(session).load_catalog(inheritance="direct")
