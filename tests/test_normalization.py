"""Unit tests for the carer normalization layer.

Tests transform_carer and CarerTransformer for:
- Name derivation (username, email local part, fallback)
- Photo and introduction field probing
- Email and address sanitization
- Embedded review extraction
- Location resolution
- Batch transformation and logging
"""

from unittest.mock import MagicMock

import pytest

from carer_directory.domain.models import GeoPoint
from carer_directory.normalization import CarerTransformer, transform_carer
from carer_directory.normalization.service import (
    ADDRESS_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    FALLBACK_NAME,
)


@pytest.fixture
def profile():
    """A well-formed carer profile document."""
    return {
        "username": "Amelia Stone",
        "email": "amelia@example.org",
        "role": "carer",
        "photoURL": "https://images.example.org/amelia.jpg",
        "bio": "Retired nurse.\n\nHappy to help with shopping.",
        "reviews": [5, 4],
        "address": "12 Harbour Street, Sydney",
        "location": {"lat": -33.8688, "lng": 151.2093},
    }


class TestTransformCarer:
    """Tests for transform_carer."""

    def test_well_formed_profile(self, profile):
        carer = transform_carer("amelia-stone", profile)

        assert carer.id == "amelia-stone"
        assert carer.name == "Amelia Stone"
        assert carer.email == "amelia@example.org"
        assert carer.photo == "https://images.example.org/amelia.jpg"
        assert carer.description == "Retired nurse.\nHappy to help with shopping."
        assert carer.reviews == [5, 4]
        assert carer.address == "12 Harbour Street, Sydney"
        assert carer.location == GeoPoint(lat=-33.8688, lng=151.2093)

    def test_hostile_username_and_mixed_reviews(self):
        carer = transform_carer(
            "jo", {"username": "<b>Jo</b>", "email": "jo@x.com", "reviews": [6, -1, "3", {"rating": 4}]}
        )

        assert carer.name == "bJo/b"
        assert carer.reviews == [5, 1, 3, 4]

    def test_name_falls_back_to_email_local_part(self):
        carer = transform_carer("c1", {"username": "   ", "email": " sam.lee@example.org "})

        assert carer.name == "sam.lee"
        assert carer.email == "sam.lee@example.org"

    def test_name_falls_back_to_literal(self):
        carer = transform_carer("c1", {"username": "<>", "email": "not-an-email"})

        assert carer.name == FALLBACK_NAME
        assert carer.email == ""

    def test_email_without_local_part_uses_fallback_name(self):
        carer = transform_carer("c1", {"email": "@example.org"})

        assert carer.email == "@example.org"
        assert carer.name == FALLBACK_NAME

    def test_photo_field_priority(self):
        carer = transform_carer(
            "c1",
            {
                "photoURL": "javascript:alert(1)",
                "photoUrl": "",
                "photo": "./images/c1.png",
                "avatarUrl": "https://example.org/avatar.png",
            },
        )

        assert carer.photo == "./images/c1.png"

    def test_description_field_priority(self):
        carer = transform_carer("c1", {"bio": " \n ", "about": "<p>About me</p>", "description": "Later"})

        assert carer.description == "pAbout me/p"

    def test_description_is_truncated(self):
        carer = transform_carer("c1", {"description": "x" * (DESCRIPTION_MAX_LENGTH + 50)})

        assert len(carer.description) == DESCRIPTION_MAX_LENGTH

    def test_address_is_single_line_and_truncated(self):
        carer = transform_carer("c1", {"address": "1 Main St\nSpringfield " + "y" * 400})

        assert "\n" not in carer.address
        assert len(carer.address) == ADDRESS_MAX_LENGTH
        assert carer.address.startswith("1 Main StSpringfield")

    def test_location_from_profile_sub_document(self):
        carer = transform_carer("c1", {"profile": {"position": "10, 20"}})

        assert carer.location == GeoPoint(lat=10, lng=20)

    def test_wrongly_typed_fields_are_emptied(self):
        carer = transform_carer(
            42,
            {"username": ["Jo"], "email": 7, "photo": {"url": "x"}, "reviews": "5", "address": None, "location": "?"},
        )

        assert carer.id == "42"
        assert carer.name == FALLBACK_NAME
        assert carer.email == ""
        assert carer.photo == ""
        assert carer.reviews == []
        assert carer.address == ""
        assert carer.location is None

    @pytest.mark.parametrize("document_id, expected", [("", ""), (None, ""), (42, "42")])
    def test_any_document_key_is_accepted(self, profile, document_id, expected):
        carer = transform_carer(document_id, profile)

        assert carer.id == expected
        assert carer.name == "Amelia Stone"

    @pytest.mark.parametrize("data", [None, "profile", [1, 2]])
    def test_non_mapping_document(self, data):
        carer = transform_carer("c1", data)

        assert carer.name == FALLBACK_NAME
        assert carer.reviews == []


class TestCarerTransformer:
    """Tests for CarerTransformer."""

    def test_transform_logs_debug_events(self, profile):
        mock_logger = MagicMock()
        transformer = CarerTransformer(logger_instance=mock_logger)

        carer = transformer.transform("amelia-stone", profile)

        assert carer.id == "amelia-stone"
        events = [call.kwargs["extra"]["event"] for call in mock_logger.debug.call_args_list]
        assert events == ["normalization.carer.transformed"]

    def test_transform_logs_missing_description(self):
        mock_logger = MagicMock()
        transformer = CarerTransformer(logger_instance=mock_logger)

        transformer.transform("c1", {"username": "Sam"})

        events = [call.kwargs["extra"]["event"] for call in mock_logger.debug.call_args_list]
        assert "normalization.carer.missing_description" in events

    def test_transform_all_preserves_order(self, profile):
        mock_logger = MagicMock()
        transformer = CarerTransformer(logger_instance=mock_logger)

        carers = transformer.transform_all([("b", {"username": "Ben"}), ("a", profile)])

        assert [carer.id for carer in carers] == ["b", "a"]
        extra = mock_logger.info.call_args.kwargs["extra"]
        assert extra == {"event": "normalization.batch.completed", "carer_count": 2, "skipped_count": 0}

    def test_transform_all_skips_blank_ids(self, profile):
        mock_logger = MagicMock()
        transformer = CarerTransformer(logger_instance=mock_logger)

        carers = transformer.transform_all([("", profile), ("  ", profile), (None, profile), ("a", profile)])

        assert [carer.id for carer in carers] == ["a"]
        skipped = [call.kwargs["extra"] for call in mock_logger.warning.call_args_list]
        assert skipped == [{"event": "normalization.carer.skipped", "reason": "missing_id"}] * 3
        assert mock_logger.info.call_args.kwargs["extra"]["skipped_count"] == 3

    def test_transform_all_empty(self):
        assert CarerTransformer(logger_instance=MagicMock()).transform_all([]) == []
