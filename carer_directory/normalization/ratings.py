"""Rating coercion and aggregation.

Review data arrives as bare numbers, numeric strings, or review objects
whose score lives under one of several field names. Everything is reduced
to integers in [1, 5]; anything that cannot be read as a finite number is
dropped rather than reported.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, List, Optional

from carer_directory.domain.models import MAX_RATING, MIN_RATING

# Field names probed on review objects, highest priority first
RATING_FIELDS = ("rating", "score", "value", "amount", "points")

DEFAULT_AVERAGE = 5.0

NUMERIC_STRING = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def coerce_number(value: Any) -> Optional[float]:
    """Read value as a finite float.

    Accepts ints and floats (not bools) and strings that look like a
    decimal number. Returns None for everything else, NaN and infinities
    included.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not NUMERIC_STRING.fullmatch(value):
            return None
    elif not isinstance(value, (int, float)):
        return None

    try:
        number = float(value)
    except OverflowError:
        return None

    return number if math.isfinite(number) else None


def normalize_rating(value: Any) -> Optional[int]:
    """Round value half-up and clamp it into [1, 5].

    Returns:
        The rating, or None when value is not a finite number (the caller
        should discard it)

    Example:
        >>> normalize_rating(4.5), normalize_rating(-1), normalize_rating(float("nan"))
        (5, 1, None)
    """
    number = coerce_number(value)
    if number is None:
        return None

    rounded = math.floor(number + 0.5)
    return min(MAX_RATING, max(MIN_RATING, rounded))


def _coerce_review(review: Any) -> Optional[float]:
    if isinstance(review, Mapping):
        for field in RATING_FIELDS:
            if field in review:
                number = coerce_number(review[field])
                if number is not None:
                    return number
        return None

    return coerce_number(review)


def extract_ratings(reviews: Any) -> List[int]:
    """Turn a loosely typed review list into clean ratings.

    Args:
        reviews: Expected to be a list of numbers, numeric strings or review
            objects; any other type yields an empty list

    Returns:
        Ratings in input order, with unreadable entries removed
    """
    if not isinstance(reviews, (list, tuple)):
        return []

    ratings = []
    for review in reviews:
        rating = normalize_rating(_coerce_review(review))
        if rating is not None:
            ratings.append(rating)

    return ratings


def calculate_average(reviews: Any) -> float:
    """Mean of the ratings, or 5.0 when there are none.

    The mean is not rounded: [4, 5] averages to 4.5. Elements that are not
    finite numbers are ignored.
    """
    if not isinstance(reviews, (list, tuple)):
        return DEFAULT_AVERAGE

    numbers = [number for number in map(coerce_number, reviews) if number is not None]
    if not numbers:
        return DEFAULT_AVERAGE

    return sum(numbers) / len(numbers)
