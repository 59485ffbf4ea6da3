import logging

from ..config import Settings
from ..crud.role_catalog import RoleCatalogRepository
from ..database import create_engine, create_session_factory
from ..errors import ConfigurationError
from .catalog import RoleCatalog, default_catalog, load_catalog_file

logger = logging.getLogger("rolegate.catalog")


async def load_configured_catalog(settings: Settings) -> RoleCatalog:
    """Build the role catalog from the source named in settings.

    Raises:
        ConfigurationError: If the source is unusable or the catalog is invalid
    """
    source = settings.catalog_source
    logger.info("Loading role catalog (source=%s)", source)

    if source == "builtin":
        return default_catalog()

    if source == "file":
        if not settings.catalog_path:
            raise ConfigurationError("CATALOG_PATH is required for the file catalog source")
        return load_catalog_file(
            settings.catalog_path,
            inheritance=settings.catalog_inheritance,
            validate_acyclic=settings.catalog_validate_acyclic,
            enforce_unique_ranks=settings.catalog_enforce_unique_ranks,
        )

    if source == "database":
        if not settings.database_url:
            raise ConfigurationError("DATABASE_URL is required for the database catalog source")
        engine = create_engine(settings.database_url, echo=settings.debug)
        try:
            session_factory = create_session_factory(engine)
            async with session_factory() as session:
                return await RoleCatalogRepository(session).load_catalog(
                    inheritance=settings.catalog_inheritance,
                    validate_acyclic=settings.catalog_validate_acyclic,
                    enforce_unique_ranks=settings.catalog_enforce_unique_ranks,
                )
        finally:
            await engine.dispose()

    raise ConfigurationError(f"Unknown catalog source '{source}'")
