"""Mini README: Tests for the local JSON snapshot of the ledger."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from wealthtracker.ledger import IncomeLedger, LedgerSnapshotStore, LedgerStorageError


def test_missing_snapshot_loads_empty_ledger(tmp_path) -> None:
    store = LedgerSnapshotStore(tmp_path / "income_data.json")

    assert len(store.load()) == 0


def test_save_then_load_preserves_entries(tmp_path) -> None:
    store = LedgerSnapshotStore(tmp_path / "nested" / "income_data.json")
    ledger = IncomeLedger(clock=lambda: datetime(2024, 3, 1, 12, 0))
    entry = ledger.add_entry(100, 20, "2024-03-01")

    store.save(ledger)
    reloaded = store.load()

    assert [item.entry_id for item in reloaded.entries()] == [entry.entry_id]
    assert reloaded.get_entry(entry.entry_id).total == pytest.approx(120.0)
    assert not store.path.with_suffix(".json.tmp").exists()


def test_corrupted_snapshot_raises(tmp_path) -> None:
    path = tmp_path / "income_data.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(LedgerStorageError):
        LedgerSnapshotStore(path).load()


def test_non_list_snapshot_raises(tmp_path) -> None:
    path = tmp_path / "income_data.json"
    path.write_text(json.dumps({"id": 1}), encoding="utf-8")

    with pytest.raises(LedgerStorageError):
        LedgerSnapshotStore(path).load()


def test_clear_removes_file(tmp_path) -> None:
    store = LedgerSnapshotStore(tmp_path / "income_data.json")
    store.save(IncomeLedger())

    store.clear()
    store.clear()

    assert not store.path.exists()
