"""Database schema for the SQL-backed document store.

All collections share one ``documents`` table. A row is identified by
``(collection, document_id)`` and stores the document body as JSON, with
ISO-8601 UTC strings for its bookkeeping timestamps.
"""

import logging

from sqlalchemy import JSON, Column, Index, String
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from .base import Document

logger = logging.getLogger(__name__)

Base = declarative_base()


class DocumentModel(Base):
    """ORM model for the documents table."""

    __tablename__ = "documents"

    collection = Column(String(255), primary_key=True, nullable=False)
    document_id = Column(String(255), primary_key=True, nullable=False)

    data = Column(JSON, nullable=False, default=dict)

    # Timestamps (stored as ISO 8601 strings)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_documents_collection", "collection"),)

    def to_document(self) -> Document:
        """Convert the row to a store-level Document."""
        return Document(id=self.document_id, data=dict(self.data or {}))


def create_schema(engine: Engine) -> None:
    """Create missing tables; existing tables are left untouched.

    Args:
        engine: SQLAlchemy engine bound to the target database
    """
    Base.metadata.create_all(engine)
    logger.info("Document store schema ready", extra={"event": "store.schema.ready"})
