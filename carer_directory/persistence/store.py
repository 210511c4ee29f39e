"""SQLAlchemy-backed implementation of the DocumentStore contract."""

import asyncio
import threading
from typing import Any, Callable, List, Mapping, Optional, Sequence, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from carer_directory.logging import get_logger

from .base import Document, DocumentStore, FieldFilter
from .database import create_database_engine, create_session_factory, session_scope
from .exceptions import DatabaseConnectionError
from .repositories import DocumentRepository

logger = get_logger(__name__, component="store")

T = TypeVar("T")


class SqlDocumentStore(DocumentStore):
    """Document store persisting JSON documents through SQLAlchemy.

    Blocking database work runs on a worker thread via asyncio.to_thread
    and is serialized by a lock, so concurrent coroutines never share a
    session.
    """

    def __init__(self, database_url: str):
        """Open (and if needed create) the database behind database_url.

        Raises:
            DatabaseConnectionError: If the database cannot be initialized
        """
        self.database_url = database_url
        self._engine: Optional[Engine] = create_database_engine(database_url)
        self._session_factory: Optional[sessionmaker] = create_session_factory(self._engine)
        self._lock = threading.Lock()

    def _run(self, operation: Callable[[DocumentRepository], T]) -> T:
        if self._session_factory is None:
            raise DatabaseConnectionError("Document store is closed")

        with self._lock:
            with session_scope(self._session_factory) as session:
                return operation(DocumentRepository(session))

    async def query_documents(
        self, collection: str, filters: Sequence[FieldFilter] = ()
    ) -> List[Document]:
        documents = await asyncio.to_thread(
            self._run, lambda repo: repo.list_collection(collection, filters)
        )
        logger.debug(
            f"Queried {len(documents)} documents from {collection}",
            extra={
                "event": "store.collection.queried",
                "collection": collection,
                "filter_count": len(filters),
                "document_count": len(documents),
            },
        )
        return documents

    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str:
        document = await asyncio.to_thread(self._run, lambda repo: repo.add(collection, data))
        logger.debug(
            "Document added",
            extra={"event": "store.document.added", "collection": collection, "document_id": document.id},
        )
        return document.id

    async def update_document(
        self, collection: str, document_id: str, partial: Mapping[str, Any]
    ) -> None:
        await asyncio.to_thread(
            self._run, lambda repo: repo.update(collection, document_id, partial)
        )
        logger.debug(
            "Document updated",
            extra={"event": "store.document.updated", "collection": collection, "document_id": document_id},
        )

    async def set_document(
        self, collection: str, document_id: str, data: Mapping[str, Any]
    ) -> None:
        """Create or replace a document under a known key (used for imports)."""
        await asyncio.to_thread(
            self._run, lambda repo: repo.set(collection, document_id, data)
        )

    async def get_document(self, collection: str, document_id: str) -> Optional[Document]:
        """Fetch a single document by key."""
        return await asyncio.to_thread(self._run, lambda repo: repo.get(collection, document_id))

    def close(self) -> None:
        """Dispose of the engine; later calls raise DatabaseConnectionError."""
        if self._engine is not None:
            logger.info("Closing document store", extra={"event": "store.closed"})
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
