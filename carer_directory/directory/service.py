"""Carer directory: cached, review-enriched view over the document store.

This module implements the orchestration that:
1. Queries carer profile documents by role
2. Normalizes them into Carer models
3. Batch-loads standalone review documents and merges their ratings
4. Caches the result behind a single-flight, force-refreshable fetch
5. Records new reviews in both the profile and the reviews collection

No public operation raises: store failures are logged and turned into a
generic load_error or a False return.
"""

import asyncio
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from carer_directory.config.models import DirectoryConfig
from carer_directory.domain.models import Carer
from carer_directory.logging import get_logger
from carer_directory.logging.context import log_context
from carer_directory.normalization.ratings import calculate_average, extract_ratings, normalize_rating
from carer_directory.normalization.service import CarerTransformer
from carer_directory.persistence.base import SERVER_TIMESTAMP, ArrayUnion, Document, DocumentStore, FieldFilter

from .models import DirectoryState, WriteOutcome, at_least_one_succeeded

logger = get_logger(__name__, component="directory")

DESCRIPTION_PLACEHOLDER = "The carer is busy writing the introduction, come back later."
LOAD_ERROR_MESSAGE = "We couldn't load the carer directory right now. Please try again later."
STORE_UNAVAILABLE_MESSAGE = (
    "The carer directory is not connected to a database, so no carers can be shown yet."
)
PLACEHOLDER_PHOTO_URL = "https://i.pravatar.cc/{size}"

REVIEW_OWNER_FIELD = "carerId"


def get_description_placeholder() -> str:
    """Text shown for carers who have not written an introduction."""
    return DESCRIPTION_PLACEHOLDER


def get_placeholder_photo(size: int = 300) -> str:
    """Avatar URL used when a carer has no photo."""
    return PLACEHOLDER_PHOTO_URL.format(size=size)


def _review_owner(data: Any) -> Optional[str]:
    """Carer id a review document belongs to, tolerating numeric ids."""
    if not isinstance(data, Mapping):
        return None

    owner = data.get(REVIEW_OWNER_FIELD)
    if isinstance(owner, bool):
        return None
    if isinstance(owner, float) and owner.is_integer():
        owner = int(owner)
    if isinstance(owner, (str, int, float)):
        return str(owner).strip() or None
    return None


def _batched(items: List[str], size: int) -> List[List[str]]:
    return [items[start:start + size] for start in range(0, len(items), size)]


class CarerDirectory:
    """
    Explicitly constructed directory of carers.

    One instance holds one DirectoryState; create separate instances for
    isolated caches. A store of None means the document database is not
    configured: loads yield an empty directory and reviews stay in memory.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        settings: Optional[DirectoryConfig] = None,
        transformer: Optional[CarerTransformer] = None,
    ):
        """
        Initialize the directory.

        Args:
            store: Document store, or None when no database is configured
            settings: Collection names, carer roles and review batch size
            transformer: Profile normalizer (defaults to CarerTransformer())
        """
        self.store = store
        self.settings = settings or DirectoryConfig()
        self.transformer = transformer or CarerTransformer()
        self.state = DirectoryState()
        self._inflight: Optional[asyncio.Future] = None

    # Read access

    @property
    def all_carers(self) -> List[Carer]:
        return self.state.carers

    def get_carer_by_id(self, carer_id: Any) -> Optional[Carer]:
        for carer in self.state.carers:
            if carer.id == carer_id:
                return carer
        return None

    def get_average_rating(self, carer_id: Any) -> float:
        """Average rating of a carer; 5.0 for unknown carers and carers without reviews."""
        carer = self.get_carer_by_id(carer_id)
        if carer is None:
            return calculate_average([])
        return calculate_average(carer.reviews)

    def get_review_count(self, carer_id: Any) -> int:
        carer = self.get_carer_by_id(carer_id)
        return len(carer.reviews) if carer is not None else 0

    def get_description(self, carer_id: Any) -> str:
        """Carer introduction, or the shared placeholder when there is none."""
        carer = self.get_carer_by_id(carer_id)
        content = carer.description.strip() if carer is not None else ""
        return content or DESCRIPTION_PLACEHOLDER

    # Loading

    async def fetch_carers(self, force: bool = False) -> None:
        """
        Load the directory unless it is cached.

        Calls made while a load is running wait for that load instead of
        starting another one. A finished load (even a failed one) is reused
        until force=True.
        """
        if self._inflight is not None:
            await asyncio.shield(self._inflight)
            return

        if self.state.has_loaded and not force:
            return

        self.state.loading = True
        self.state.load_error = ""
        self._inflight = asyncio.ensure_future(self._load())
        await asyncio.shield(self._inflight)

    async def _load(self) -> None:
        with log_context(fetch_id=uuid4().hex[:12]):
            logger.info(
                "Directory fetch started",
                extra={"event": "directory.fetch.started", "store_configured": self.store is not None},
            )
            try:
                if self.store is None:
                    self.state.carers = []
                    self.state.load_error = STORE_UNAVAILABLE_MESSAGE
                    logger.warning(
                        "No document store configured; directory is empty",
                        extra={"event": "directory.fetch.store_unavailable"},
                    )
                    return

                documents = await self.store.query_documents(
                    self.settings.profiles_collection,
                    [FieldFilter(self.settings.role_field, "in", list(self.settings.carer_roles))],
                )
                carers = self.transformer.transform_all(
                    (document.id, document.data) for document in documents
                )
                self.state.carers = await self.enrich_with_reviews(carers)

                logger.info(
                    f"Loaded {len(self.state.carers)} carers",
                    extra={"event": "directory.fetch.completed", "carer_count": len(self.state.carers)},
                )
            except Exception as e:
                self.state.carers = []
                self.state.load_error = LOAD_ERROR_MESSAGE
                logger.error(
                    f"Directory fetch failed: {e}",
                    exc_info=True,
                    extra={"event": "directory.fetch.failed", "error_type": type(e).__name__},
                )
            finally:
                self.state.has_loaded = True
                self.state.loading = False
                self._inflight = None

    async def enrich_with_reviews(self, carers: List[Carer]) -> List[Carer]:
        """
        Merge ratings from the reviews collection into carers.

        Carer ids are queried in batches of settings.review_batch_size, all
        batches concurrently. A failed batch is logged and skipped; its
        carers keep only their embedded reviews.

        Returns:
            New Carer objects, in the same order, with embedded ratings
            followed by fetched ratings (no de-duplication)
        """
        if not carers or self.store is None:
            return carers

        carer_ids = [carer.id for carer in carers]
        batches = _batched(carer_ids, self.settings.review_batch_size)
        results = await asyncio.gather(*(self._fetch_review_batch(batch) for batch in batches))

        reviews_by_carer: Dict[str, List[Any]] = {}
        for documents in results:
            for document in documents:
                owner = _review_owner(document.data)
                if owner is not None:
                    reviews_by_carer.setdefault(owner, []).append(document.data)

        logger.debug(
            "Reviews merged",
            extra={
                "event": "directory.reviews.merged",
                "batch_count": len(batches),
                "reviewed_carer_count": len(reviews_by_carer),
            },
        )

        return [
            carer.model_copy(
                update={"reviews": extract_ratings(list(carer.reviews) + reviews_by_carer.get(carer.id, []))}
            )
            for carer in carers
        ]

    async def _fetch_review_batch(self, carer_ids: List[str]) -> List[Document]:
        try:
            return await self.store.query_documents(
                self.settings.reviews_collection,
                [FieldFilter(REVIEW_OWNER_FIELD, "in", carer_ids)],
            )
        except Exception as e:
            logger.warning(
                f"Review batch query failed: {e}",
                exc_info=True,
                extra={"event": "directory.reviews.batch_failed", "batch_size": len(carer_ids)},
            )
            return []

    # Writing

    async def add_review(self, carer_id: Any, rating: Any) -> bool:
        """
        Record a rating for a carer.

        Two independent writes are attempted: appending to the profile's
        embedded reviews and inserting a review document. The in-memory carer
        is updated only if at least one of them succeeds.

        Returns:
            True if the review was recorded, False for unknown carers, unusable
            ratings, or when both writes failed
        """
        carer = self.get_carer_by_id(carer_id)
        if carer is None:
            logger.info(
                "Review rejected: unknown carer",
                extra={"event": "directory.review.unknown_carer", "carer_id": str(carer_id)},
            )
            return False

        normalized = normalize_rating(rating)
        if normalized is None:
            logger.info(
                "Review rejected: rating is not a finite number",
                extra={"event": "directory.review.invalid_rating", "carer_id": carer.id},
            )
            return False

        with log_context(carer_id=carer.id):
            if self.store is None:
                carer.reviews.append(normalized)
                logger.info(
                    "Review kept in memory only; no document store configured",
                    extra={"event": "directory.review.added_locally", "rating": normalized},
                )
                return True

            outcomes = [
                await self._attempt_write(
                    "profile_reviews",
                    lambda: self.store.update_document(
                        self.settings.profiles_collection,
                        carer.id,
                        {"reviews": ArrayUnion([normalized])},
                    ),
                ),
                await self._attempt_write(
                    "review_document",
                    lambda: self.store.add_document(
                        self.settings.reviews_collection,
                        {REVIEW_OWNER_FIELD: carer.id, "rating": normalized, "createdAt": SERVER_TIMESTAMP},
                    ),
                ),
            ]

            if not at_least_one_succeeded(outcomes):
                logger.error(
                    "Review could not be saved",
                    extra={"event": "directory.review.failed", "rating": normalized},
                )
                return False

            # A forced fetch may have replaced the carer records during the writes
            current = self.get_carer_by_id(carer.id)
            if current is not None:
                current.reviews.append(normalized)
            logger.info(
                "Review added",
                extra={
                    "event": "directory.review.added",
                    "rating": normalized,
                    "writes_succeeded": sum(1 for outcome in outcomes if outcome.succeeded),
                },
            )
            return True

    async def _attempt_write(
        self, target: str, write: Callable[[], Awaitable[Any]]
    ) -> WriteOutcome:
        try:
            await write()
        except Exception as e:
            logger.warning(
                f"Review write to {target} failed: {e}",
                exc_info=True,
                extra={"event": "directory.review.write_failed", "target": target},
            )
            return WriteOutcome(target=target, succeeded=False, error_message=str(e))
        return WriteOutcome(target=target, succeeded=True)
