"""Shared test helpers."""

from .fake_store import FIXED_WRITE_TIME, InMemoryDocumentStore

__all__ = ["FIXED_WRITE_TIME", "InMemoryDocumentStore"]
