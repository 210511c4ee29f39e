"""Core domain models for the carer directory.

This module defines the canonical shapes produced by the normalization layer:
- GeoPoint: a complete, finite latitude/longitude pair
- Carer: a sanitized carer profile with its integer review ratings

Raw profile documents never leave the normalization layer; everything past
it works with these models.
"""

import math
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

MIN_RATING = 1
MAX_RATING = 5


class GeoPoint(BaseModel):
    """Geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")

    @field_validator("lat", "lng")
    @classmethod
    def ensure_finite(cls, v: float) -> float:
        """Reject NaN and infinite coordinates."""
        if not math.isfinite(v):
            raise ValueError("Coordinates must be finite numbers")
        return v


class Carer(BaseModel):
    """Canonical carer profile.

    Built fresh from the backing profile document on every directory fetch.
    Empty strings mean "not provided" for every text field; location is
    either a full point or None.
    """

    id: str = Field(..., description="Backing document key; empty when the source document had none")
    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field("", description="Sanitized email address, or empty")
    photo: str = Field("", description="Sanitized photo URL, or empty")
    description: str = Field("", max_length=1000, description="Sanitized introduction")
    reviews: List[int] = Field(default_factory=list, description="Ratings in arrival order")
    address: str = Field("", max_length=255, description="Sanitized single-line address")
    location: Optional[GeoPoint] = Field(None, description="Resolved coordinates")

    @field_validator("reviews")
    @classmethod
    def validate_reviews(cls, v: List[int]) -> List[int]:
        """Every rating must already be an integer in [1, 5]."""
        for rating in v:
            if isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
                raise ValueError(f"Rating out of range: {rating!r}")
        return v

    @property
    def review_count(self) -> int:
        """Number of ratings recorded for this carer."""
        return len(self.reviews)

    @property
    def average_rating(self) -> float:
        """Mean rating, 5.0 when there are no reviews yet."""
        from carer_directory.normalization.ratings import calculate_average

        return calculate_average(self.reviews)

    model_config = {"json_schema_extra": {"example": {
        "id": "amelia-stone",
        "name": "Amelia Stone",
        "email": "amelia@example.org",
        "photo": "https://images.example.org/amelia.jpg",
        "description": "Amelia has been supporting families in our community for over a decade.",
        "reviews": [5, 4, 5, 5],
        "address": "12 Harbour Street, Sydney NSW 2000",
        "location": {"lat": -33.8688, "lng": 151.2093},
    }}}
