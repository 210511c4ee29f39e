"""Data models for directory state and review write tracking."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from carer_directory.domain.models import Carer


class DirectoryStatus(str, Enum):
    """Lifecycle of the cached directory."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass
class DirectoryState:
    """
    Process-scoped cache of the carer directory.

    Attributes:
        carers: Carers from the most recent load, in query order
        loading: Whether a load is in flight
        load_error: User-facing message from the most recent load, or empty
        has_loaded: Whether any load has finished (successfully or not)
    """

    carers: List[Carer] = field(default_factory=list)
    loading: bool = False
    load_error: str = ""
    has_loaded: bool = False

    @property
    def status(self) -> DirectoryStatus:
        if self.loading:
            return DirectoryStatus.LOADING
        if not self.has_loaded:
            return DirectoryStatus.UNLOADED
        if self.load_error:
            return DirectoryStatus.ERROR
        return DirectoryStatus.LOADED


@dataclass
class WriteOutcome:
    """
    Result of one independent write attempted by add_review.

    Attributes:
        target: Short name of the write (e.g. "profile_reviews")
        succeeded: Whether the store accepted the write
        error_message: Failure description when succeeded is False
    """

    target: str
    succeeded: bool
    error_message: Optional[str] = None


def at_least_one_succeeded(outcomes: Iterable[WriteOutcome]) -> bool:
    """Success policy for the review dual write.

    The two writes are not atomic and nothing is rolled back: a review that
    reached either the profile or the reviews collection counts as saved.
    A provider with transactional batch writes could make this all-or-nothing.
    """
    return any(outcome.succeeded for outcome in outcomes)
