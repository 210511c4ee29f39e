"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from carer_directory.utils.timestamps import (
    ensure_utc,
    format_timestamp,
    parse_timestamp,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now function."""

    def test_utc_now_returns_utc_datetime(self):
        now = utc_now()

        assert now.tzinfo == timezone.utc

    def test_utc_now_is_recent(self):
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    """Tests for ensure_utc function."""

    def test_ensure_utc_with_none(self):
        assert ensure_utc(None) is None

    def test_naive_datetime_is_assumed_utc(self):
        result = ensure_utc(datetime(2025, 11, 4, 12, 0))

        assert result == datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)

    def test_aware_datetime_is_converted(self):
        sydney = timezone(timedelta(hours=11))
        result = ensure_utc(datetime(2025, 11, 4, 23, 0, tzinfo=sydney))

        assert result == datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc


class TestFormatTimestamp:
    """Tests for format_timestamp function."""

    def test_format_has_microseconds_and_z_suffix(self):
        moment = datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc)

        assert format_timestamp(moment) == "2025-11-04T12:00:00.123456Z"

    def test_format_converts_to_utc(self):
        moment = datetime(2025, 11, 4, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(moment) == "2025-11-04T12:00:00.000000Z"


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_parses_formatted_value(self):
        moment = datetime(2025, 11, 4, 12, 0, 0, 500, tzinfo=timezone.utc)

        assert parse_timestamp(format_timestamp(moment)) == moment

    def test_parses_offset_value(self):
        result = parse_timestamp("2025-11-04T14:00:00+02:00")

        assert result == datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "2025-13-01T00:00:00Z"])
    def test_blank_or_invalid_returns_none(self, value):
        assert parse_timestamp(value) is None
