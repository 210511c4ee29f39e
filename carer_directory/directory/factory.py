"""Factory functions for wiring a CarerDirectory from configuration."""

from typing import Optional

from carer_directory.config.environment import EnvironmentConfig
from carer_directory.config.models import AppConfig
from carer_directory.logging import get_logger
from carer_directory.persistence.base import DocumentStore
from carer_directory.persistence.exceptions import DatabaseConnectionError
from carer_directory.persistence.store import SqlDocumentStore

from .service import CarerDirectory

logger = get_logger(__name__, component="directory")


def build_store(app_config: AppConfig, env_config: Optional[EnvironmentConfig] = None) -> Optional[DocumentStore]:
    """
    Open the configured document store.

    Returns:
        SqlDocumentStore, or None when storage is disabled, no URL is set,
        or the database cannot be opened (the directory then degrades to an
        empty, memory-only mode)
    """
    override = env_config.database_url if env_config is not None else None
    database_url = app_config.resolve_database_url(override)

    if database_url is None:
        logger.warning(
            "Document store not configured",
            extra={"event": "directory.store.not_configured", "storage_enabled": app_config.storage.enabled},
        )
        return None

    try:
        return SqlDocumentStore(database_url)
    except DatabaseConnectionError as e:
        logger.error(
            f"Document store unavailable: {e}",
            extra={"event": "directory.store.unavailable"},
        )
        return None


def build_directory(
    app_config: AppConfig,
    env_config: Optional[EnvironmentConfig] = None,
    store: Optional[DocumentStore] = None,
) -> CarerDirectory:
    """
    Create a CarerDirectory for the given configuration.

    Args:
        app_config: Application configuration
        env_config: Environment overrides (DATABASE_URL)
        store: Pre-built store; skips build_store when given
    """
    if store is None:
        store = build_store(app_config, env_config)
    return CarerDirectory(store=store, settings=app_config.directory)
