"""Utility functions for text sanitization and timestamp handling."""

from .sanitize import sanitize_multiline_text, sanitize_single_line_text, sanitize_url
from .timestamps import ensure_utc, format_timestamp, parse_timestamp, utc_now

__all__ = [
    # Sanitization
    "sanitize_single_line_text",
    "sanitize_multiline_text",
    "sanitize_url",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
]
