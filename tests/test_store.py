"""Tests for the record store."""

from __future__ import annotations

from character_browser.store import RecordStore


def test_starts_empty() -> None:
    store = RecordStore()
    assert store.records == ()
    assert len(store) == 0
    assert store.revision == 0


def test_replace_swaps_contents(make_character) -> None:
    store = RecordStore()
    store.append([make_character(id="1")])
    store.replace([make_character(id="2"), make_character(id="3")])
    assert [c.id for c in store.records] == ["2", "3"]


def test_append_keeps_arrival_order_and_duplicates(make_character) -> None:
    store = RecordStore()
    store.append([make_character(id="1"), make_character(id="2")])
    store.append([make_character(id="2"), make_character(id="3")])
    assert [c.id for c in store.records] == ["1", "2", "2", "3"]


def test_every_mutation_bumps_revision(make_character) -> None:
    store = RecordStore()
    store.append([make_character()])
    store.replace([])
    store.clear()
    assert store.revision == 3


def test_records_snapshot_is_not_affected_by_later_mutation(make_character) -> None:
    store = RecordStore()
    store.append([make_character(id="1")])
    snapshot = store.records
    store.append([make_character(id="2")])
    assert [c.id for c in snapshot] == ["1"]
    store.clear()
    assert len(snapshot) == 1
    assert len(store) == 0


def test_replace_accepts_generators(make_character) -> None:
    store = RecordStore()
    store.replace(make_character(id=str(i)) for i in range(3))
    assert len(store) == 3
