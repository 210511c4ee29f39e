"""Engine creation and session lifecycle for the SQL-backed document store.

Unlike a process-wide database handle, every SqlDocumentStore owns its own
engine and session factory, so tests and tools can run isolated stores
side by side.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from carer_directory.logging import get_logger

from .exceptions import DatabaseConnectionError
from .schema import create_schema

logger = get_logger(__name__, component="database")

MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def create_database_engine(database_url: str) -> Engine:
    """Create an engine, prepare SQLite settings and ensure the schema exists.

    Args:
        database_url: SQLAlchemy URL (e.g. "sqlite:///./data/carers.db")

    Returns:
        Ready-to-use Engine

    Raises:
        DatabaseConnectionError: If the URL is invalid or the database is unreachable
    """
    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    logger.info(
        "Initializing document store database",
        extra={"event": "database.initializing", "database_url": _redact_url(database_url)},
    )

    try:
        is_sqlite = database_url.startswith("sqlite")
        is_memory = database_url in MEMORY_URLS

        if is_sqlite and not is_memory:
            db_file = Path(database_url.replace("sqlite:///", "", 1))
            if not db_file.parent.exists():
                logger.info(f"Creating database directory: {db_file.parent}")
                db_file.parent.mkdir(parents=True, exist_ok=True)

        engine_options = {"pool_pre_ping": True}
        if is_sqlite:
            # Store calls run on worker threads
            engine_options["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if is_memory:
            # One shared connection, otherwise every thread sees an empty database
            engine_options["poolclass"] = StaticPool

        engine = create_engine(database_url, **engine_options)

        if is_sqlite:
            _configure_sqlite(engine, wal=not is_memory)

        _validate_connection(engine)
        create_schema(engine)

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True)
        raise DatabaseConnectionError(error_msg) from e

    logger.info(
        "Document store database ready",
        extra={"event": "database.initialised", "database_url": _redact_url(database_url)},
    )
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory with explicit transactions and non-expiring objects."""
    return sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)


def _configure_sqlite(engine: Engine, wal: bool) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def _redact_url(url: str) -> str:
    """Hide the password of a server database URL before logging it."""
    if url.startswith("sqlite"):
        return url

    if "@" in url and "://" in url:
        scheme, rest = url.split("://", 1)
        credentials, host = rest.rsplit("@", 1)
        username = credentials.split(":", 1)[0]
        return f"{scheme}://{username}:***@{host}"

    return url


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error.

    Example:
        >>> with session_scope(factory) as session:
        ...     DocumentRepository(session).list_collection("users")
    """
    session = factory()
    try:
        yield session
        session.commit()
        logger.debug("Database session committed", extra={"event": "database.session.committed"})
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back due to exception: {e}",
            extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
        )
        raise
    finally:
        session.close()
