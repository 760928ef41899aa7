"""
FastAPI dependencies for the request stores.

The stores are built once at startup and kept on ``app.state``; each store is
paired with a lock so that routes serialize their read-modify-write cycles.
"""

import threading
from dataclasses import dataclass, field

from fastapi import Request

from .config import HISTORY_KEY, MAX_HISTORY_ITEMS, MAX_SAVED_REQUESTS, SAVED_REQUESTS_KEY
from .services.stores import HistoryStore, SavedRequestStore


@dataclass
class Stores:
    """Process-wide store objects and their mutation locks."""
    history: HistoryStore
    saved: SavedRequestStore
    history_lock: threading.Lock = field(default_factory=threading.Lock)
    saved_lock: threading.Lock = field(default_factory=threading.Lock)


def build_stores(blob_store) -> Stores:
    """Create both stores on top of one blob store using configured caps."""
    return Stores(
        history=HistoryStore(blob_store, MAX_HISTORY_ITEMS, key=HISTORY_KEY),
        saved=SavedRequestStore(blob_store, MAX_SAVED_REQUESTS, key=SAVED_REQUESTS_KEY),
    )


def get_stores(request: Request) -> Stores:
    """Dependency returning the application's stores."""
    return request.app.state.stores
