"""
Engine publication.

Readers always get a fully built engine: a new catalog is validated and
turned into an engine first, then the provider's reference is swapped in a
single assignment. A live engine is never mutated.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from ..errors import ConfigurationError
from .catalog import RoleCatalog
from .engine import AuthorizationEngine

logger = logging.getLogger("rolegate.catalog")

CatalogLoader = Callable[[], RoleCatalog]


class EngineProvider:
    def __init__(self, catalog: RoleCatalog | None = None):
        self._engine: AuthorizationEngine | None = None
        self._lock = threading.Lock()
        if catalog is not None:
            self.publish(catalog)

    @property
    def ready(self) -> bool:
        return self._engine is not None

    def get(self) -> AuthorizationEngine:
        engine = self._engine
        if engine is None:
            raise ConfigurationError("No role catalog has been published")
        return engine

    def publish(self, catalog: RoleCatalog) -> AuthorizationEngine:
        engine = AuthorizationEngine(catalog)
        with self._lock:
            self._engine = engine
        logger.info("Published authorization engine with %d roles", len(engine.roles))
        return engine

    def reload_from(self, loader: CatalogLoader) -> AuthorizationEngine:
        """Build a catalog with ``loader`` and publish it.

        If the loader raises ConfigurationError the current engine stays in
        place and the error propagates.
        """
        try:
            catalog = loader()
        except ConfigurationError:
            logger.error(
                "Role catalog reload failed; keeping the current engine (ready=%s)",
                self.ready,
            )
            raise
        return self.publish(catalog)
