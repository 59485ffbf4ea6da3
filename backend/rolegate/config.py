import os
import threading
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()

CatalogSource = Literal["builtin", "file", "database"]
InheritanceMode = Literal["flattened", "direct"]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, default: bool) -> bool:
    raw_value = os.getenv(name, str(default)).strip().lower()
    if raw_value in _TRUE_VALUES:
        return True
    if raw_value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value")


class Settings(BaseModel):
    app_name: str = Field(default="Rolegate")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    catalog_source: CatalogSource = Field(default="builtin")
    catalog_path: str | None = Field(default=None)
    catalog_inheritance: InheritanceMode = Field(default="flattened")
    catalog_validate_acyclic: bool = Field(default=True)
    catalog_enforce_unique_ranks: bool = Field(default=True)
    database_url: str | None = Field(default=None)

    @classmethod
    def from_env(cls) -> "Settings":
        catalog_source = os.getenv(
            "CATALOG_SOURCE", cls.model_fields["catalog_source"].default
        ).strip().lower()
        if catalog_source not in {"builtin", "file", "database"}:
            raise ValueError(
                "CATALOG_SOURCE must be one of: builtin, file, database"
            )

        catalog_path = os.getenv("CATALOG_PATH", "").strip() or None
        if catalog_source == "file" and catalog_path is None:
            raise ValueError("CATALOG_PATH must be set when CATALOG_SOURCE=file")

        catalog_inheritance = os.getenv(
            "CATALOG_INHERITANCE", cls.model_fields["catalog_inheritance"].default
        ).strip().lower()
        if catalog_inheritance not in {"flattened", "direct"}:
            raise ValueError("CATALOG_INHERITANCE must be 'flattened' or 'direct'")

        database_url = os.getenv("DATABASE_URL", "").strip() or None
        if catalog_source == "database" and database_url is None:
            raise ValueError(
                "DATABASE_URL environment variable must be set when CATALOG_SOURCE=database"
            )
        if database_url is not None:
            parsed_db = urlparse(database_url)
            if parsed_db.scheme != "postgresql+asyncpg":
                raise ValueError("DATABASE_URL must start with 'postgresql+asyncpg://'")
            if not parsed_db.hostname:
                raise ValueError("DATABASE_URL must include hostname")

        log_level = os.getenv("LOG_LEVEL", cls.model_fields["log_level"].default)

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=log_level.strip().upper(),
            catalog_source=catalog_source,
            catalog_path=catalog_path,
            catalog_inheritance=catalog_inheritance,
            catalog_validate_acyclic=_parse_bool(
                "CATALOG_VALIDATE_ACYCLIC",
                cls.model_fields["catalog_validate_acyclic"].default,
            ),
            catalog_enforce_unique_ranks=_parse_bool(
                "CATALOG_ENFORCE_UNIQUE_RANKS",
                cls.model_fields["catalog_enforce_unique_ranks"].default,
            ),
            database_url=database_url,
        )


# Settings are built on first access so that importing the package never
# requires a configured environment.
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Raises:
        ValueError: If environment variables are missing or invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Forget the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None

