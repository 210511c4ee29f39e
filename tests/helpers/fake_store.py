"""In-memory DocumentStore for directory tests.

Records every call and lets tests inject failures per operation and
collection without touching a database.
"""

import asyncio
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from carer_directory.persistence.base import (
    Document,
    DocumentStore,
    FieldFilter,
    apply_update,
    matches_filters,
    resolve_write,
)
from carer_directory.persistence.exceptions import PersistenceError, RecordNotFoundError

FIXED_WRITE_TIME = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store with call recording and failure injection.

    Attributes:
        collections: collection -> ordered {document_id: body}
        queries: (collection, filters) for every query_documents call
        updates: (collection, document_id, partial) for every update call
        adds: (collection, data) for every add call
        fail_queries: collections whose queries raise PersistenceError
        fail_query_when: optional predicate(collection, filters) that makes a query raise
        fail_updates / fail_adds: make the matching write raise PersistenceError
        query_delay: seconds each query sleeps, so concurrent callers overlap
    """

    def __init__(self, collections: Optional[Mapping[str, Mapping[str, Dict[str, Any]]]] = None):
        self.collections: Dict[str, "OrderedDict[str, Dict[str, Any]]"] = {}
        for name, documents in (collections or {}).items():
            self.collections[name] = OrderedDict((key, dict(body)) for key, body in documents.items())

        self.queries: List[Tuple[str, List[FieldFilter]]] = []
        self.updates: List[Tuple[str, str, Dict[str, Any]]] = []
        self.adds: List[Tuple[str, Dict[str, Any]]] = []

        self.fail_queries: set = set()
        self.fail_query_when: Optional[Callable[[str, Sequence[FieldFilter]], bool]] = None
        self.fail_updates = False
        self.fail_adds = False
        self.query_delay = 0.0
        self._next_id = 0

    async def query_documents(
        self, collection: str, filters: Sequence[FieldFilter] = ()
    ) -> List[Document]:
        self.queries.append((collection, list(filters)))
        await asyncio.sleep(self.query_delay)

        if collection in self.fail_queries:
            raise PersistenceError(f"query on {collection} failed")
        if self.fail_query_when is not None and self.fail_query_when(collection, filters):
            raise PersistenceError(f"query on {collection} failed")

        return [
            Document(id=key, data=dict(body))
            for key, body in self.collections.get(collection, {}).items()
            if matches_filters(body, filters)
        ]

    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str:
        self.adds.append((collection, dict(data)))
        if self.fail_adds:
            raise PersistenceError(f"insert into {collection} failed")

        self._next_id += 1
        document_id = f"generated-{self._next_id}"
        self.collections.setdefault(collection, OrderedDict())[document_id] = resolve_write(
            data, FIXED_WRITE_TIME
        )
        return document_id

    async def update_document(
        self, collection: str, document_id: str, partial: Mapping[str, Any]
    ) -> None:
        self.updates.append((collection, document_id, dict(partial)))
        if self.fail_updates:
            raise PersistenceError(f"update of {collection}/{document_id} failed")

        documents = self.collections.get(collection, {})
        if document_id not in documents:
            raise RecordNotFoundError(f"Document {collection}/{document_id} not found")
        documents[document_id] = apply_update(documents[document_id], partial, FIXED_WRITE_TIME)

    def review_queries(self, reviews_collection: str = "reviews") -> List[List[FieldFilter]]:
        """Filters of every query issued against the reviews collection."""
        return [filters for collection, filters in self.queries if collection == reviews_collection]
