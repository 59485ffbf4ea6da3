"""Shared test fixtures and configuration."""
import pytest

from rolegate.auth.catalog import RoleCatalog, default_catalog
from rolegate.auth.engine import AuthorizationEngine


@pytest.fixture
def catalog() -> RoleCatalog:
    return default_catalog()


@pytest.fixture
def engine(catalog: RoleCatalog) -> AuthorizationEngine:
    return AuthorizationEngine(catalog)


@pytest.fixture
def small_catalog() -> RoleCatalog:
    """Three-tier catalog with direct-parent inheritance."""
    return RoleCatalog.build(
        {"Officer": 1, "Leader": 2, "Chief": 3},
        {
            "Officer": {"content.read"},
            "Leader": {"content.update", "content.read"},
            "Chief": {"user.read"},
        },
        {"Leader": {"Officer"}, "Chief": {"Leader"}},
        inheritance="direct",
        super_admin_role="Chief",
    )
