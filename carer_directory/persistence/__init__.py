"""Persistence layer: the document store contract and its SQL implementation.

Public API:
    # Store contract
    - DocumentStore: async query/add/update interface the directory depends on
    - Document, FieldFilter, ArrayUnion, SERVER_TIMESTAMP

    # SQL-backed store
    - SqlDocumentStore(database_url)
    - DocumentRepository: synchronous CRUD inside a session

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database initialization failures
    - RecordNotFoundError: Update targeted a missing document
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from carer_directory.persistence import FieldFilter, SqlDocumentStore
    >>>
    >>> store = SqlDocumentStore("sqlite:///./data/carers.db")
    >>> carers = await store.query_documents("users", [FieldFilter("role", "in", ["carer"])])
"""

from .base import (
    SERVER_TIMESTAMP,
    ArrayUnion,
    Document,
    DocumentStore,
    FieldFilter,
    apply_update,
    matches_filters,
    resolve_write,
)
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import DocumentRepository
from .store import SqlDocumentStore

__all__ = [
    # Contract
    "DocumentStore",
    "Document",
    "FieldFilter",
    "ArrayUnion",
    "SERVER_TIMESTAMP",
    "apply_update",
    "matches_filters",
    "resolve_write",
    # Implementation
    "SqlDocumentStore",
    "DocumentRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
