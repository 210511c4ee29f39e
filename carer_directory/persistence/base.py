"""Document store contract used by the carer directory.

The directory only needs a small slice of a document database: filtered
collection queries, inserts with generated ids, and partial updates that
may carry an array-union directive or a server timestamp sentinel. This
module defines that slice plus the pure helpers implementations share for
evaluating filters and applying partial updates.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Sequence, Tuple

from carer_directory.utils.timestamps import format_timestamp

SUPPORTED_OPERATORS = ("==", "in", "array-contains", "array-contains-any")


@dataclass(frozen=True)
class FieldFilter:
    """Single ``field <op> value`` predicate on a document."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in SUPPORTED_OPERATORS:
            raise ValueError(
                f"Unsupported filter operator: {self.op!r}. "
                f"Must be one of: {', '.join(SUPPORTED_OPERATORS)}"
            )
        if self.op in ("in", "array-contains-any") and not isinstance(self.value, (list, tuple)):
            raise ValueError(f"Operator {self.op!r} requires a list value")

    def matches(self, data: Mapping) -> bool:
        """Evaluate the predicate against a document body."""
        if self.field not in data:
            return False

        current = data[self.field]
        if self.op == "==":
            return current == self.value
        if self.op == "in":
            return any(current == candidate for candidate in self.value)

        if not isinstance(current, list):
            return False
        if self.op == "array-contains":
            return self.value in current
        return any(candidate in current for candidate in self.value)


@dataclass
class Document:
    """Query result: a document key and its body."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ArrayUnion:
    """Partial-update directive: append each value not already present."""

    values: Tuple[Any, ...]

    def __init__(self, values: Sequence[Any]):
        object.__setattr__(self, "values", tuple(values))


class _ServerTimestamp:
    """Sentinel replaced by the store's own clock when a write is applied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def matches_filters(data: Mapping, filters: Sequence[FieldFilter]) -> bool:
    """True when data satisfies every filter."""
    return all(query_filter.matches(data) for query_filter in filters)


def resolve_write(data: Mapping, written_at: datetime) -> Dict[str, Any]:
    """Replace SERVER_TIMESTAMP sentinels in a new document body."""
    resolved = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            resolved[key] = format_timestamp(written_at)
        elif isinstance(value, ArrayUnion):
            resolved[key] = list(value.values)
        else:
            resolved[key] = value
    return resolved


def apply_update(current: Mapping, partial: Mapping, written_at: datetime) -> Dict[str, Any]:
    """Merge a partial update into a document body.

    Plain values overwrite, ArrayUnion appends values missing by equality
    (turning a non-list field into a list), and SERVER_TIMESTAMP becomes the
    write time as an ISO-8601 string.

    Returns:
        The new document body; current is left unmodified
    """
    updated = dict(current)
    for key, value in partial.items():
        if isinstance(value, ArrayUnion):
            existing = updated.get(key)
            merged = list(existing) if isinstance(existing, list) else []
            for item in value.values:
                if item not in merged:
                    merged.append(item)
            updated[key] = merged
        elif value is SERVER_TIMESTAMP:
            updated[key] = format_timestamp(written_at)
        else:
            updated[key] = value
    return updated


class DocumentStore(ABC):
    """Asynchronous document database used by the directory."""

    @abstractmethod
    async def query_documents(
        self, collection: str, filters: Sequence[FieldFilter] = ()
    ) -> List[Document]:
        """Return every document in collection matching all filters."""

    @abstractmethod
    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str:
        """Insert a document under a generated key and return the key."""

    @abstractmethod
    async def update_document(
        self, collection: str, document_id: str, partial: Mapping[str, Any]
    ) -> None:
        """Apply a partial update.

        Raises:
            RecordNotFoundError: If the document does not exist
        """
