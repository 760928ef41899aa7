"""
Property-based tests for the History and Saved-Requests stores.

History: fingerprint de-duplication, most-recent-first order and positional
eviction. Saved requests: id identity, preserved creation time and eviction
of the globally oldest entries.
"""

import itertools
import json

import pytest
from hypothesis import given, strategies as st, settings

from request_ingest.exceptions import InvalidImportPayloadError
from request_ingest.schemas.record import CanonicalRequest, KeyValue
from request_ingest.services.blob_store import MemoryBlobStore
from request_ingest.services.stores import HistoryStore, SavedRequestStore


def counter_clock(start: int = 1_000):
    counter = itertools.count(start)
    return lambda: next(counter)


def request_for(n: int, **kwargs) -> CanonicalRequest:
    return CanonicalRequest(url=f"https://api.example.com/items/{n}", **kwargs)


def make_history(max_items: int) -> HistoryStore:
    return HistoryStore(MemoryBlobStore(), max_items, clock=counter_clock())


def make_saved(max_items: int) -> SavedRequestStore:
    return SavedRequestStore(MemoryBlobStore(), max_items, clock=counter_clock())


class TestHistoryStore:
    """Recency order, de-duplication and eviction."""

    def test_most_recent_first(self):
        store = make_history(10)
        for n in range(3):
            store.add(request_for(n))
        assert [r.url for r in store.get_all()] == [
            "https://api.example.com/items/2",
            "https://api.example.com/items/1",
            "https://api.example.com/items/0",
        ]

    def test_add_stamps_created_at(self):
        store = make_history(10)
        stored = store.add(request_for(1, created_at=5))
        assert stored.created_at == 1_000
        assert store.get_all()[0].created_at == 1_000

    @given(cap=st.integers(min_value=1, max_value=8))
    @settings(max_examples=30)
    def test_inserting_past_cap_evicts_least_recent(self, cap: int):
        """
        Property: N+1 distinct inserts into a store capped at N drop the first one.
        """
        store = make_history(cap)
        for n in range(cap + 1):
            store.add(request_for(n))

        urls = [r.url for r in store.get_all()]
        assert len(urls) == cap
        assert "https://api.example.com/items/0" not in urls
        assert urls[0] == f"https://api.example.com/items/{cap}"

    @given(size=st.integers(min_value=2, max_value=8), data=st.data())
    @settings(max_examples=50)
    def test_duplicate_moves_to_front_without_growing(self, size: int, data):
        """
        Property: re-adding an exact duplicate of entry k moves it to the front.
        """
        store = make_history(size)
        for n in range(size):
            store.add(request_for(n))
        k = data.draw(st.integers(min_value=0, max_value=size - 1))

        store.add(request_for(k))

        urls = [r.url for r in store.get_all()]
        assert len(urls) == size
        assert urls[0] == f"https://api.example.com/items/{k}"
        assert urls.count(f"https://api.example.com/items/{k}") == 1

    def test_duplicate_keeps_older_distinct_entries_at_capacity(self):
        store = make_history(3)
        for n in range(3):
            store.add(request_for(n))
        store.add(request_for(0))
        assert {r.url for r in store.get_all()} == {
            f"https://api.example.com/items/{n}" for n in range(3)
        }

    def test_cosmetic_difference_is_a_duplicate(self):
        store = make_history(10)
        store.add(request_for(1, headers=[
            KeyValue(key="A", value="1"), KeyValue(key="B", value="2"),
        ]))
        store.add(request_for(1, headers=[
            KeyValue(key="b", value="2"), KeyValue(key="a", value="1"),
            KeyValue(key="C", value="off", checked=False),
        ]))
        assert len(store.get_all()) == 1

    def test_repeated_header_row_is_a_duplicate(self):
        store = make_history(10)
        store.add(request_for(1, headers=[KeyValue(key="A", value="1")]))
        store.add(request_for(1, headers=[KeyValue(key="A", value="1"), KeyValue(key="a", value="1")]))
        assert len(store.get_all()) == 1

    def test_blank_rows_removed_before_persisting(self):
        store = make_history(10)
        store.add(request_for(1, headers=[KeyValue(key="", value="scratch")]))
        assert store.get_all()[0].headers == []

    def test_delete_and_clear(self):
        store = make_history(10)
        first = store.add(request_for(1))
        store.add(request_for(2))

        assert store.delete(first.id) is True
        assert store.delete(first.id) is False
        assert store.find(first.id) is None
        assert len(store.get_all()) == 1

        store.clear()
        assert store.get_all() == []


class TestSavedRequestStore:
    """Id identity and created_at-based eviction."""

    def test_new_entry_gets_created_at(self):
        store = make_saved(10)
        saved = store.save(request_for(1, id="a"))
        assert saved.created_at == 1_000

    def test_replace_preserves_created_at_and_updates_fields(self):
        store = make_saved(10)
        store.save(request_for(1, id="a", name="first"))
        store.save(request_for(2, id="b"))
        updated = store.save(request_for(1, id="a", name="renamed", created_at=99_999))

        assert updated.created_at == 1_000
        assert store.get("a").name == "renamed"
        assert len(store.get_all()) == 2

    def test_eviction_discards_globally_oldest(self):
        store = make_saved(2)
        store.save(request_for(1, id="a"))      # created 1000
        store.save(request_for(2, id="b"))      # created 1001
        store.save(request_for(3, id="a"))      # replaced in place, keeps 1000
        store.save(request_for(4, id="c"))      # created 1002, evicts "a"

        assert [r.id for r in store.get_all()] == ["c", "b"]

    @given(ops=st.lists(st.integers(min_value=0, max_value=9), min_size=1, max_size=30),
           cap=st.integers(min_value=1, max_value=5))
    @settings(max_examples=100)
    def test_kept_entries_are_newest_by_created_at(self, ops: list[int], cap: int):
        """
        Property: whatever the operation order, the store holds the `cap`
        entries with the newest created_at, newest first.
        """
        clock = counter_clock()
        store = SavedRequestStore(MemoryBlobStore(), cap, clock=clock)
        expected: dict[str, int] = {}
        ticks = itertools.count(1_000)

        for op in ops:
            request_id = f"r{op}"
            store.save(request_for(op, id=request_id))
            if request_id not in expected:
                expected[request_id] = next(ticks)
            if len(expected) > cap:
                newest = sorted(expected.items(), key=lambda item: item[1], reverse=True)[:cap]
                expected = dict(newest)

        stored = store.get_all()
        assert len(stored) <= cap
        assert {r.id for r in stored} == set(expected)
        assert [r.created_at for r in stored] == sorted(expected.values(), reverse=True)

    def test_delete(self):
        store = make_saved(10)
        store.save(request_for(1, id="a"))
        assert store.delete("a") is True
        assert store.delete("a") is False
        assert store.get("a") is None

    def test_folders(self):
        store = make_saved(10)
        store.save(request_for(1, id="a"))
        store.save(request_for(2, id="b", folder_id="f1"))

        moved = store.move_to_folder("a", "f1")
        assert moved.folder_id == "f1"
        assert {r.id for r in store.by_folder("f1")} == {"a", "b"}

        store.move_to_folder("b", None)
        assert [r.id for r in store.by_folder("f1")] == ["a"]
        assert store.move_to_folder("missing", "f1") is None

    def test_export_uses_camel_case(self):
        store = make_saved(10)
        store.save(request_for(1, id="a", query_params=[KeyValue(key="q", value="1")]))

        exported = json.loads(store.export_json())
        assert exported[0]["id"] == "a"
        assert exported[0]["queryParams"] == [{"key": "q", "value": "1", "checked": True}]
        assert exported[0]["createdAt"] == 1_000
        assert exported[0]["bodyData"] == {"type": "none"}


class TestBulkImport:
    """Bulk import merges by id and never partially writes."""

    def test_import_merges_and_counts_new_entries(self):
        store = make_saved(10)
        store.save(request_for(1, id="a", name="mine"))
        payload = [
            request_for(1, id="a", name="theirs").to_json_dict(),
            request_for(2, id="b").to_json_dict(),
        ]

        added = store.import_records(payload)

        assert added == 1
        assert store.get("a").name == "mine"
        assert store.get("b") is not None

    def test_import_accepts_json_text(self):
        store = make_saved(10)
        text = json.dumps([request_for(1, id="x", created_at=5).to_json_dict()])
        assert store.import_records(text) == 1
        assert store.get("x").created_at == 5

    def test_import_truncates_to_cap(self):
        store = make_saved(2)
        store.save(request_for(1, id="a"))
        payload = [request_for(n, id=f"n{n}").to_json_dict() for n in range(5)]
        assert store.import_records(payload) == 1
        assert len(store.get_all()) == 2

    @pytest.mark.parametrize("payload", [
        {"id": "a"},
        "not json",
        '{"id": "a"}',
        42,
        [{"headers": "not-a-list"}],
    ])
    def test_invalid_payload_leaves_store_untouched(self, payload):
        store = make_saved(10)
        store.save(request_for(1, id="a"))
        before = store.export_json()

        with pytest.raises(InvalidImportPayloadError):
            store.import_records(payload)

        assert store.export_json() == before
