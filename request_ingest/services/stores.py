"""
History and Saved-Requests stores.

Both stores read the full collection from a blob store, mutate it in memory
and write it back. They do no locking: callers must serialize concurrent
mutations of the same store.

The two stores evict differently. History truncates by list position after
inserting at the front; Saved-Requests sorts by ``created_at`` descending
before truncating, so it always drops the globally oldest entries.
"""

import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from ..exceptions import InvalidImportPayloadError
from ..schemas.record import CanonicalRequest, now_ms
from .fingerprint import fingerprint

logger = logging.getLogger(__name__)


def _load(blob_store, key: str) -> list[CanonicalRequest]:
    raw = blob_store.get(key, [])
    records = []
    for entry in raw if isinstance(raw, list) else []:
        try:
            records.append(CanonicalRequest.model_validate(entry))
        except ValidationError as e:
            logger.warning("Dropping unreadable stored request under %s: %s", key, e)
    return records


def _dump(blob_store, key: str, records: list[CanonicalRequest]) -> None:
    blob_store.put(key, [record.to_json_dict() for record in records])


def _newest_first(records: list[CanonicalRequest]) -> list[CanonicalRequest]:
    return sorted(records, key=lambda r: r.created_at or 0, reverse=True)


class HistoryStore:
    """
    Recency-ordered, fingerprint-deduplicated, size-capped request history.

    Args:
        blob_store: Persistence collaborator
        max_items: Maximum number of entries kept
        key: Blob store key of the collection
        clock: Source of epoch-millisecond timestamps
    """

    def __init__(
        self,
        blob_store,
        max_items: int,
        key: str = "requestHistory",
        clock: Callable[[], int] = now_ms,
    ):
        self.blob_store = blob_store
        self.max_items = max(1, max_items)
        self.key = key
        self.clock = clock

    def get_all(self) -> list[CanonicalRequest]:
        """History entries, most recent first."""
        return _load(self.blob_store, self.key)

    def find(self, request_id: str) -> CanonicalRequest | None:
        return next((r for r in self.get_all() if r.id == request_id), None)

    def add(self, record: CanonicalRequest) -> CanonicalRequest:
        """
        Add a request to history.

        Any existing entry with the same fingerprint is removed, the record is
        stamped with the current time and inserted at the front, and the tail
        is truncated to ``max_items``.

        Returns:
            The stored record
        """
        record = record.without_blank_rows()
        digest = fingerprint(record)
        history = [r for r in self.get_all() if fingerprint(r) != digest]

        record = record.model_copy(update={"created_at": self.clock()})
        history.insert(0, record)

        if len(history) > self.max_items:
            logger.info("History over capacity, evicting %d entr(ies)", len(history) - self.max_items)
            history = history[:self.max_items]

        _dump(self.blob_store, self.key, history)
        return record

    def delete(self, request_id: str) -> bool:
        history = self.get_all()
        remaining = [r for r in history if r.id != request_id]
        if len(remaining) == len(history):
            return False
        _dump(self.blob_store, self.key, remaining)
        return True

    def clear(self) -> None:
        _dump(self.blob_store, self.key, [])


class SavedRequestStore:
    """
    Id-identified, user-curated, size-capped collection of saved requests.

    Args:
        blob_store: Persistence collaborator
        max_items: Maximum number of entries kept
        key: Blob store key of the collection
        clock: Source of epoch-millisecond timestamps
    """

    def __init__(
        self,
        blob_store,
        max_items: int,
        key: str = "savedRequests",
        clock: Callable[[], int] = now_ms,
    ):
        self.blob_store = blob_store
        self.max_items = max(1, max_items)
        self.key = key
        self.clock = clock

    def get_all(self) -> list[CanonicalRequest]:
        """Saved requests, newest ``created_at`` first."""
        return _newest_first(_load(self.blob_store, self.key))

    def get(self, request_id: str) -> CanonicalRequest | None:
        return next((r for r in self.get_all() if r.id == request_id), None)

    def by_folder(self, folder_id: str) -> list[CanonicalRequest]:
        return [r for r in self.get_all() if r.folder_id == folder_id]

    def save(self, record: CanonicalRequest) -> CanonicalRequest:
        """
        Save a new request or replace an existing one with the same id.

        A replaced entry keeps its position and original ``created_at``; a new
        entry is appended with ``created_at`` set to now. Over capacity, the
        globally oldest entries are discarded.

        Returns:
            The stored record
        """
        record = record.without_blank_rows()
        requests = self.get_all()

        existing = next((i for i, r in enumerate(requests) if r.id == record.id), None)
        if existing is not None:
            record = record.model_copy(update={"created_at": requests[existing].created_at})
            requests[existing] = record
        else:
            record = record.model_copy(update={"created_at": self.clock()})
            requests.append(record)

        if len(requests) > self.max_items:
            logger.info(
                "Saved requests over capacity, evicting %d oldest", len(requests) - self.max_items
            )
            requests = _newest_first(requests)[:self.max_items]

        _dump(self.blob_store, self.key, requests)
        return record

    def delete(self, request_id: str) -> bool:
        requests = self.get_all()
        remaining = [r for r in requests if r.id != request_id]
        if len(remaining) == len(requests):
            return False
        _dump(self.blob_store, self.key, remaining)
        return True

    def move_to_folder(self, request_id: str, folder_id: str | None) -> CanonicalRequest | None:
        """Set or clear the folder of a saved request; ``None`` if it does not exist."""
        requests = self.get_all()
        for index, record in enumerate(requests):
            if record.id == request_id:
                requests[index] = record.model_copy(update={"folder_id": folder_id})
                _dump(self.blob_store, self.key, requests)
                return requests[index]
        return None

    def clear(self) -> None:
        _dump(self.blob_store, self.key, [])

    def export_json(self) -> str:
        """Serialize the full collection to pretty-printed JSON."""
        return json.dumps(
            [record.to_json_dict() for record in self.get_all()],
            indent=2,
            ensure_ascii=False,
        )

    def import_records(self, payload: Any) -> int:
        """
        Merge a list of exported records into the store.

        Existing entries win over incoming ones with the same id, and the
        merged list is truncated by position to ``max_items``.

        Args:
            payload: A parsed JSON list of records, or a JSON string of one

        Returns:
            Net number of entries added

        Raises:
            InvalidImportPayloadError: If the payload is not a list of valid
                records; the store is left untouched
        """
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise InvalidImportPayloadError(f"Invalid JSON: {e}") from e
        if not isinstance(payload, list):
            raise InvalidImportPayloadError()

        try:
            incoming = [CanonicalRequest.model_validate(entry) for entry in payload]
        except ValidationError as e:
            raise InvalidImportPayloadError(
                f"Import payload contains an invalid request: {e.error_count()} error(s)"
            ) from e

        current = self.get_all()
        seen: set[str] = set()
        merged: list[CanonicalRequest] = []
        for record in current + incoming:
            if record.id in seen:
                continue
            seen.add(record.id)
            merged.append(record.without_blank_rows())

        merged = merged[:self.max_items]
        _dump(self.blob_store, self.key, merged)
        added = len(merged) - len(current)
        logger.info("Bulk import added %d saved request(s)", added)
        return added
