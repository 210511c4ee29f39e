"""Normalization layer for converting raw profile documents to Carer models.

This module provides:
- Rating coercion and aggregation (normalize_rating, extract_ratings, calculate_average)
- Coordinate extraction across legacy location shapes (extract_coordinates, extract_location)
- CarerTransformer / transform_carer: raw profile document -> Carer
"""

from .coordinates import extract_coordinates, extract_location
from .ratings import calculate_average, extract_ratings, normalize_rating
from .service import CarerTransformer, transform_carer

__all__ = [
    "CarerTransformer",
    "transform_carer",
    "normalize_rating",
    "extract_ratings",
    "calculate_average",
    "extract_coordinates",
    "extract_location",
]
