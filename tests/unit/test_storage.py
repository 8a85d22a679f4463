"""Tests for storage.py and records.py - JSON record log."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from ecolight.records import PersistedRequestRecord
from ecolight.storage import JsonRecordStore, StorageError


def make_record(plant: str = "Cactus", minutes: int = 0, **kwargs) -> PersistedRequestRecord:
    defaults = dict(
        plant_name=plant,
        average_lux=6000.0,
        duration_seconds=10,
        timestamp=datetime(2026, 3, 1, 9, 0) + timedelta(minutes=minutes),
        recommendation="Excelente!",
        readings_trace=(5900.0, 6100.0),
        is_suitable=True,
        min_light_level=5000.0,
        max_light_level=50000.0,
    )
    defaults.update(kwargs)
    return PersistedRequestRecord(**defaults)


class TestPersistedRequestRecord:
    """Tests for PersistedRequestRecord serialization."""

    def test_trace_stored_as_text(self):
        data = make_record(readings_trace=(1.5, 2.25, 3.0)).to_dict()
        assert data["readings_trace"] == "1.5,2.25,3.0"
        assert data["timestamp"] == "2026-03-01T09:00:00"

    def test_roundtrip(self):
        record = make_record(image_ref="content://img/3", id=7)
        assert PersistedRequestRecord.from_dict(record.to_dict()) == record

    def test_from_dict_tolerates_bad_trace(self):
        data = make_record().to_dict()
        data["readings_trace"] = "1.0,oops,2.0"
        assert PersistedRequestRecord.from_dict(data).readings_trace == (1.0, 2.0)

    def test_from_dict_defaults(self):
        record = PersistedRequestRecord.from_dict(
            {"plant_name": "X", "average_lux": 3, "timestamp": "2026-01-01T00:00:00"}
        )
        assert record.readings_trace == ()
        assert record.is_suitable is None
        assert record.recommendation == ""
        assert record.duration_seconds == 0

    def test_records_are_immutable(self):
        record = make_record()
        with pytest.raises(AttributeError):
            record.plant_name = "Other"  # type: ignore[misc]


class TestJsonRecordStore:
    """Tests for JsonRecordStore."""

    def test_missing_file_lists_nothing(self, store):
        assert store.list_all() == []
        assert len(store) == 0

    def test_append_assigns_incrementing_ids(self, store):
        first = store.append(make_record())
        second = store.append(make_record(minutes=1))
        assert (first.id, second.id) == (1, 2)
        assert len(store) == 2

    def test_list_all_most_recent_first(self, store):
        store.append(make_record("Old", minutes=0))
        store.append(make_record("Newest", minutes=10))
        store.append(make_record("Middle", minutes=5))
        assert [r.plant_name for r in store.list_all()] == ["Newest", "Middle", "Old"]

    def test_same_timestamp_orders_by_id(self, store):
        store.append(make_record("A"))
        store.append(make_record("B"))
        assert [r.plant_name for r in store.list_all()] == ["B", "A"]

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "records.json"
        JsonRecordStore(path).append(make_record(readings_trace=(1.5, 2.25)))

        records = JsonRecordStore(path).list_all()
        assert len(records) == 1
        assert records[0].readings_trace == (1.5, 2.25)
        assert records[0].id == 1

    def test_file_layout(self, store):
        store.append(make_record())
        data = json.loads(store.path.read_text())
        assert data["next_id"] == 2
        assert data["records"][0]["plant_name"] == "Cactus"

    def test_corrupt_file_raises(self, store):
        store.path.write_text("{broken")
        with pytest.raises(StorageError):
            store.list_all()
        with pytest.raises(StorageError):
            store.append(make_record())

    def test_unexpected_layout_raises(self, store):
        store.path.write_text(json.dumps([1, 2, 3]))
        with pytest.raises(StorageError):
            store.list_all()

    def test_corrupt_record_raises(self, store):
        store.path.write_text(json.dumps({"next_id": 2, "records": [{"plant_name": "X"}]}))
        with pytest.raises(StorageError):
            store.list_all()

    def test_mixed_timezone_timestamps_raise_storage_error(self, store):
        store.append(make_record("Naive"))
        store.append(make_record("Aware"))
        data = json.loads(store.path.read_text())
        data["records"][1]["timestamp"] = "2026-03-01T09:05:00+00:00"
        store.path.write_text(json.dumps(data))
        with pytest.raises(StorageError):
            store.list_all()

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = JsonRecordStore(blocker / "records.json")
        with pytest.raises(StorageError):
            store.append(make_record())

    def test_failed_write_keeps_existing_records(self, store):
        store.append(make_record("Kept"))
        with pytest.raises(StorageError):
            store.append(make_record(average_lux=object()))  # not JSON serializable
        assert [r.plant_name for r in store.list_all()] == ["Kept"]
