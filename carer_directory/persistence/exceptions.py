"""Persistence layer exceptions.

All document store errors inherit from PersistenceError so callers can
catch the whole family with one except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the backing database cannot be initialized or reached.

    Examples:
    - Invalid or empty database URL
    - Database file not accessible
    - Operation attempted after the store was closed
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an update targets a document that does not exist.

    Lookups that may legitimately miss return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a database constraint.

    Examples:
    - Duplicate (collection, document_id) key
    - Document body that cannot be serialized as JSON
    """

    pass
