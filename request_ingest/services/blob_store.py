"""
Key-value blob stores used as the persistence collaborator of the request stores.

Both implementations expose ``get(key, default)`` and ``put(key, value)``;
values are JSON-compatible documents written back whole on every mutation.
"""

import copy
from typing import Any, Callable

from sqlalchemy.orm import Session

from ..models.blob import StoreBlob


class MemoryBlobStore:
    """In-process blob store, for tests and embedding callers."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class SqlBlobStore:
    """
    Blob store persisted through SQLAlchemy.

    Args:
        session_factory: Callable returning a new Session (e.g. ``SessionLocal``)
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str, default: Any = None) -> Any:
        with self._session_factory() as db:
            blob = db.get(StoreBlob, key)
            if blob is None or blob.payload is None:
                return default
            return blob.payload

    def put(self, key: str, value: Any) -> None:
        with self._session_factory() as db:
            blob = db.get(StoreBlob, key)
            if blob is None:
                db.add(StoreBlob(key=key, payload=value))
            else:
                blob.payload = value
            db.commit()
