"""Carer normalization service for converting profile documents to Carer models.

This module implements the mapping that:
1. Extracts ratings from the profile's embedded reviews
2. Picks the first usable photo URL and introduction across legacy field names
3. Sanitizes username, email and address
4. Derives a non-empty display name
5. Resolves coordinates from any supported location shape
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Tuple

from carer_directory.domain.models import Carer
from carer_directory.logging import get_logger
from carer_directory.utils.sanitize import (
    sanitize_multiline_text,
    sanitize_single_line_text,
    sanitize_url,
)

from .coordinates import extract_location
from .ratings import extract_ratings

logger = get_logger(__name__, component="normalization")

PHOTO_FIELDS = ("photoURL", "photoUrl", "photo", "avatarUrl")
DESCRIPTION_FIELDS = ("bio", "about", "description")

USERNAME_MAX_LENGTH = 120
EMAIL_MAX_LENGTH = 254
DESCRIPTION_MAX_LENGTH = 1000
ADDRESS_MAX_LENGTH = 255

FALLBACK_NAME = "Carer"


def _first_sanitized(data: Mapping, fields: Tuple[str, ...], sanitizer: Callable[[Any], str]) -> str:
    for field in fields:
        cleaned = sanitizer(data.get(field))
        if cleaned:
            return cleaned
    return ""


def _derive_name(username: str, email: str) -> str:
    if username:
        return username
    local_part = email.split("@", 1)[0].strip() if email else ""
    return local_part or FALLBACK_NAME


def transform_carer(document_id: Any, data: Any) -> Carer:
    """Map one raw profile document onto the canonical Carer.

    Args:
        document_id: Key of the backing document
        data: Raw document body; non-mapping values are treated as empty

    Returns:
        Carer built only from sanitized values
    """
    if not isinstance(data, Mapping):
        data = {}

    username = sanitize_single_line_text(data.get("username"), max_length=USERNAME_MAX_LENGTH)
    email = sanitize_single_line_text(data.get("email"), max_length=EMAIL_MAX_LENGTH)
    if "@" not in email:
        email = ""

    return Carer(
        id="" if document_id is None else str(document_id),
        name=_derive_name(username, email),
        email=email,
        photo=_first_sanitized(data, PHOTO_FIELDS, sanitize_url),
        description=_first_sanitized(
            data,
            DESCRIPTION_FIELDS,
            lambda value: sanitize_multiline_text(value, max_length=DESCRIPTION_MAX_LENGTH),
        ),
        reviews=extract_ratings(data.get("reviews")),
        address=sanitize_single_line_text(data.get("address"), max_length=ADDRESS_MAX_LENGTH),
        location=extract_location(data),
    )


class CarerTransformer:
    """Normalizes batches of profile documents into Carer models.

    Wraps transform_carer with structured logging. Errors are not swallowed
    here; the directory decides how a failed load is reported.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        """Initialize CarerTransformer.

        Args:
            logger_instance: Logger instance (defaults to module logger)
        """
        self.logger = logger_instance or logger

    def transform(self, document_id: Any, data: Any) -> Carer:
        """Transform a single profile document."""
        carer = transform_carer(document_id, data)

        if not carer.description:
            self.logger.debug(
                f"Carer {carer.id} has no introduction",
                extra={"event": "normalization.carer.missing_description", "carer_id": carer.id},
            )

        self.logger.debug(
            "Normalized carer",
            extra={
                "event": "normalization.carer.transformed",
                "carer_id": carer.id,
                "review_count": len(carer.reviews),
                "has_location": carer.location is not None,
            },
        )
        return carer

    def transform_all(self, documents: Iterable[Tuple[Any, Any]]) -> List[Carer]:
        """Transform (document_id, data) pairs, preserving order.

        Documents with a blank key are skipped and logged.
        """
        carers = []
        skipped_count = 0

        for document_id, data in documents:
            carer = self.transform(document_id, data)
            if not carer.id.strip():
                skipped_count += 1
                self.logger.warning(
                    "Skipping profile document without an id",
                    extra={"event": "normalization.carer.skipped", "reason": "missing_id"},
                )
                continue
            carers.append(carer)

        self.logger.info(
            f"Normalized {len(carers)} carer profiles",
            extra={
                "event": "normalization.batch.completed",
                "carer_count": len(carers),
                "skipped_count": skipped_count,
            },
        )
        return carers
