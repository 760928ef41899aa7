"""
Models package for Request Ingest.

Exports all SQLAlchemy models for database operations.
"""

from .blob import StoreBlob

__all__ = [
    "StoreBlob",
]
