"""Data access layer for documents stored in the SQL database.

DocumentRepository performs synchronous CRUD inside a caller-provided
session and returns store-level Document objects rather than ORM rows.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from carer_directory.utils.timestamps import format_timestamp, utc_now

from .base import Document, FieldFilter, apply_update, matches_filters, resolve_write
from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import DocumentModel

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Repository for document operations within one collection namespace."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def list_collection(
        self, collection: str, filters: Sequence[FieldFilter] = ()
    ) -> List[Document]:
        """Return documents of a collection that match every filter.

        Filters are evaluated on the decoded JSON bodies, in insertion order.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(DocumentModel)
                .where(DocumentModel.collection == collection)
                .order_by(DocumentModel.created_at, DocumentModel.document_id)
            )
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error querying collection {collection}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to query collection {collection}: {e}") from e

        documents = [row.to_document() for row in rows]
        return [document for document in documents if matches_filters(document.data, filters)]

    def get(self, collection: str, document_id: str) -> Optional[Document]:
        """Retrieve one document, or None if it does not exist.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            row = self.session.get(DocumentModel, (collection, document_id))
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {collection}/{document_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve document: {e}") from e

        return row.to_document() if row is not None else None

    def add(
        self,
        collection: str,
        data: Mapping[str, Any],
        written_at: Optional[datetime] = None,
    ) -> Document:
        """Insert a document under a freshly generated key.

        Raises:
            DataIntegrityError: If the generated key collides
            PersistenceError: If database error occurs
        """
        return self._insert(collection, uuid4().hex, data, written_at or utc_now())

    def set(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
        written_at: Optional[datetime] = None,
    ) -> Document:
        """Create or fully replace a document under a known key.

        Raises:
            PersistenceError: If database error occurs
        """
        written_at = written_at or utc_now()
        try:
            row = self.session.get(DocumentModel, (collection, document_id))
            if row is None:
                return self._insert(collection, document_id, data, written_at)

            row.data = resolve_write(data, written_at)
            row.updated_at = format_timestamp(written_at)
            self.session.flush()
            return row.to_document()
        except PersistenceError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error writing {collection}/{document_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to write document: {e}") from e

    def update(
        self,
        collection: str,
        document_id: str,
        partial: Mapping[str, Any],
        written_at: Optional[datetime] = None,
    ) -> Document:
        """Merge a partial update into an existing document.

        Raises:
            RecordNotFoundError: If the document does not exist
            PersistenceError: If database error occurs
        """
        written_at = written_at or utc_now()
        try:
            row = self.session.get(DocumentModel, (collection, document_id))
            if row is None:
                raise RecordNotFoundError(f"Document {collection}/{document_id} not found")

            # Assign a new dict so the JSON column registers the change
            row.data = apply_update(row.data or {}, partial, written_at)
            row.updated_at = format_timestamp(written_at)
            self.session.flush()
            return row.to_document()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating {collection}/{document_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update document: {e}") from e

    def _insert(
        self, collection: str, document_id: str, data: Mapping[str, Any], written_at: datetime
    ) -> Document:
        stamp = format_timestamp(written_at)
        row = DocumentModel(
            collection=collection,
            document_id=document_id,
            data=resolve_write(data, written_at),
            created_at=stamp,
            updated_at=stamp,
        )
        try:
            self.session.add(row)
            self.session.flush()
        except IntegrityError as e:
            logger.error(f"Integrity error inserting {collection}/{document_id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert document due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting {collection}/{document_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert document: {e}") from e

        return row.to_document()
