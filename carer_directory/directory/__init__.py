"""Carer directory: cached, review-enriched carer listings."""

from .factory import build_directory, build_store
from .models import DirectoryState, DirectoryStatus, WriteOutcome, at_least_one_succeeded
from .service import (
    DESCRIPTION_PLACEHOLDER,
    LOAD_ERROR_MESSAGE,
    STORE_UNAVAILABLE_MESSAGE,
    CarerDirectory,
    get_description_placeholder,
    get_placeholder_photo,
)

__all__ = [
    "CarerDirectory",
    "DirectoryState",
    "DirectoryStatus",
    "WriteOutcome",
    "at_least_one_succeeded",
    "build_directory",
    "build_store",
    "get_description_placeholder",
    "get_placeholder_photo",
    "DESCRIPTION_PLACEHOLDER",
    "LOAD_ERROR_MESSAGE",
    "STORE_UNAVAILABLE_MESSAGE",
]
