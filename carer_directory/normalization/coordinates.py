"""Coordinate extraction from loosely shaped location data.

Profiles have stored their position in many ways over time: GeoJSON style
``[lng, lat]`` arrays, ``"lat, lng"`` strings, objects keyed ``lat/lng``,
``latitude/longitude``, ``_lat/_long`` (serialized provider GeoPoints) or
``y/x``, and any of those nested under ``location``/``position``/``geo``
sub-objects. This module searches such a value for the first usable
latitude/longitude pair.

The search keeps a set of visited container ids and a depth cap, so cyclic
or absurdly nested input ends with None instead of recursing forever.
"""

import re
from collections.abc import Mapping
from typing import Any, Optional, Set

from carer_directory.domain.models import GeoPoint

from .ratings import coerce_number

# Latitude/longitude key pairs, highest priority first
LAT_LNG_FIELD_PAIRS = (
    ("latitude", "longitude"),
    ("lat", "lng"),
    ("lat", "long"),
    ("latitude", "long"),
    ("_lat", "_long"),
    ("y", "x"),
)
LAT_LNG_TEXT_FIELD = "latLng"
COORDINATES_FIELD = "coordinates"
NESTED_LOCATION_FIELDS = ("location", "position", "geo", "geopoint")

# Top-level profile fields tried by extract_location, in order
LOCATION_CANDIDATE_FIELDS = ("location", "coordinates", "position", "geo", "geopoint")
PROFILE_FIELD = "profile"

_SEARCHED_FIELDS = frozenset((LAT_LNG_TEXT_FIELD, COORDINATES_FIELD) + NESTED_LOCATION_FIELDS)

MAX_DEPTH = 32

NUMBER_IN_TEXT = re.compile(r"[-+]?(?:\d+(?:\.\d+)?|\.\d+)")


def make_point(lat: Any, lng: Any) -> Optional[GeoPoint]:
    """Build a GeoPoint when both values are finite and within range."""
    lat_value = coerce_number(lat)
    lng_value = coerce_number(lng)
    if lat_value is None or lng_value is None:
        return None

    if not (-90.0 <= lat_value <= 90.0 and -180.0 <= lng_value <= 180.0):
        return None

    return GeoPoint(lat=lat_value, lng=lng_value)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, bool, int, float))


def _from_text(text: str) -> Optional[GeoPoint]:
    numbers = NUMBER_IN_TEXT.findall(text)
    if len(numbers) not in (2, 3):
        return None

    point = make_point(numbers[0], numbers[1])
    if point is None and len(numbers) == 3:
        # Leading index or altitude
        point = make_point(numbers[1], numbers[2])
    return point


def _from_attributes(value: Any) -> Optional[GeoPoint]:
    latitude = getattr(value, "latitude", None)
    longitude = getattr(value, "longitude", None)
    if latitude is None or longitude is None:
        return None
    return make_point(latitude, longitude)


class _CoordinateSearch:
    """One extraction pass; owns the visited set for that pass."""

    def __init__(self):
        self.seen: Set[int] = set()

    def search(self, value: Any, depth: int = 0) -> Optional[GeoPoint]:
        if value is None or depth > MAX_DEPTH:
            return None

        if isinstance(value, str):
            return _from_text(value)

        if isinstance(value, (bool, int, float)):
            return None

        if isinstance(value, (Mapping, list, tuple)):
            if id(value) in self.seen:
                return None
            self.seen.add(id(value))

            if isinstance(value, Mapping):
                return self._from_mapping(value, depth)
            return self._from_sequence(value, depth)

        return _from_attributes(value)

    def _from_sequence(self, items, depth: int) -> Optional[GeoPoint]:
        if 2 <= len(items) <= 3 and all(_is_scalar(item) for item in items):
            # GeoJSON order first, then the plain reading
            return make_point(items[1], items[0]) or make_point(items[0], items[1])

        for item in items:
            point = self.search(item, depth + 1)
            if point is not None:
                return point

        return None

    def _from_mapping(self, mapping: Mapping, depth: int) -> Optional[GeoPoint]:
        for lat_key, lng_key in LAT_LNG_FIELD_PAIRS:
            if lat_key in mapping and lng_key in mapping:
                point = make_point(mapping[lat_key], mapping[lng_key])
                if point is not None:
                    return point

        for field in (LAT_LNG_TEXT_FIELD, COORDINATES_FIELD) + NESTED_LOCATION_FIELDS:
            if field in mapping:
                point = self.search(mapping[field], depth + 1)
                if point is not None:
                    return point

        # Last resort: any nested container under an unrecognised key
        for key, value in mapping.items():
            if key in _SEARCHED_FIELDS or _is_scalar(value):
                continue
            point = self.search(value, depth + 1)
            if point is not None:
                return point

        return None


def extract_coordinates(value: Any) -> Optional[GeoPoint]:
    """Find the first latitude/longitude pair inside value.

    Args:
        value: Mapping, list/tuple, string, or an object exposing
            ``latitude``/``longitude`` attributes

    Returns:
        GeoPoint, or None if no valid pair exists

    Example:
        >>> extract_coordinates([20, 10])
        GeoPoint(lat=10.0, lng=20.0)
        >>> extract_coordinates({"a": {"b": {"lat": 1, "lng": 2}}})
        GeoPoint(lat=1.0, lng=2.0)
    """
    return _CoordinateSearch().search(value)


def extract_location(document: Any) -> Optional[GeoPoint]:
    """Resolve a profile document's location from its candidate fields.

    Tries the top-level fields first, then the same names under
    ``profile``.
    """
    if not isinstance(document, Mapping):
        return None

    scopes = [document]
    profile = document.get(PROFILE_FIELD)
    if isinstance(profile, Mapping):
        scopes.append(profile)

    for scope in scopes:
        for field in LOCATION_CANDIDATE_FIELDS:
            point = extract_coordinates(scope.get(field))
            if point is not None:
                return point

    return None
