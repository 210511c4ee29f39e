"""Domain models for the carer directory."""

from .models import MAX_RATING, MIN_RATING, Carer, GeoPoint

__all__ = ["Carer", "GeoPoint", "MIN_RATING", "MAX_RATING"]
