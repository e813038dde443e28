"""Tests for the segmented key-value storage."""

import pytest

from pet_registry_api.app.core.constants import U64_MAX
from pet_registry_api.app.core.db import open_database
from pet_registry_api.app.core.exceptions import RecordTooLargeError, StorageCorruptionError, StorageError
from pet_registry_api.app.schemas.pet import FoundReport
from pet_registry_api.app.storage import stable_memory
from pet_registry_api.app.storage.codec import RecordCodec
from pet_registry_api.app.storage.stable_memory import StableMemory, encode_u64


def make_report(pet_id: int, finder: str = "Bob") -> FoundReport:
    return FoundReport(pet_id=pet_id, finder_name=finder, found_location="5th Ave", created_at=1)


@pytest.fixture
def memory(database):
    return StableMemory(database)


@pytest.fixture
def reports(memory):
    return memory.map(2, RecordCodec(FoundReport, 512))


class TestStableMap:
    def test_get_missing_key_returns_none(self, reports):
        assert reports.get(1) is None
        assert 1 not in reports
        assert len(reports) == 0

    def test_insert_returns_previous_value(self, reports):
        assert reports.insert(1, make_report(1, "Bob")) is None

        previous = reports.insert(1, make_report(1, "Alice"))

        assert previous == make_report(1, "Bob")
        assert reports.get(1) == make_report(1, "Alice")
        assert len(reports) == 1

    def test_remove_returns_removed_value(self, reports):
        reports.insert(7, make_report(7))

        assert reports.remove(7) == make_report(7)
        assert reports.get(7) is None
        assert reports.remove(7) is None

    def test_iterate_in_numeric_key_order(self, reports):
        keys = [300, 1, U64_MAX, 2**63, 5, 0]
        for key in keys:
            reports.insert(key, make_report(key))

        assert [key for key, _ in reports.iterate()] == sorted(keys)

    def test_iterate_spans_batches_and_restarts(self, reports, monkeypatch):
        monkeypatch.setattr(stable_memory, "SCAN_BATCH_SIZE", 2)
        for key in range(1, 8):
            reports.insert(key, make_report(key))

        first = [key for key, _ in reports.iterate()]
        second = [key for key, _ in reports.iterate()]

        assert first == list(range(1, 8))
        assert second == first

    def test_keys_outside_u64_are_rejected(self, reports):
        with pytest.raises(ValueError):
            reports.insert(-1, make_report(1))
        with pytest.raises(ValueError):
            reports.get(U64_MAX + 1)
        with pytest.raises(TypeError):
            reports.get("1")


class TestSegments:
    def test_same_key_in_different_segments_does_not_collide(self, memory):
        first = memory.map(1, RecordCodec(FoundReport, 512))
        second = memory.map(2, RecordCodec(FoundReport, 512))

        first.insert(1, make_report(1, "first"))
        second.insert(1, make_report(1, "second"))

        assert first.get(1).finder_name == "first"
        assert second.get(1).finder_name == "second"

    def test_segment_cannot_be_claimed_twice(self, memory):
        memory.map(1, RecordCodec(FoundReport, 512))

        with pytest.raises(ValueError):
            memory.map(1, RecordCodec(FoundReport, 512))
        with pytest.raises(ValueError):
            memory.cell(1)


class TestFailures:
    def test_undecodable_value_is_fatal(self, reports, database):
        reports.insert(1, make_report(1))
        database.execute(
            "UPDATE stable_entries SET value = ? WHERE segment = ? AND key = ?",
            (b"\xff not json", 2, encode_u64(1)),
        )

        with pytest.raises(StorageCorruptionError):
            reports.get(1)
        with pytest.raises(StorageCorruptionError):
            list(reports.iterate())

    def test_oversized_record_is_rejected_without_writing(self, memory):
        tiny = memory.map(3, RecordCodec(FoundReport, 64))

        with pytest.raises(RecordTooLargeError):
            tiny.insert(1, make_report(1, "x" * 100))
        assert tiny.get(1) is None

    def test_rolled_back_transaction_leaves_no_trace(self, reports, database):
        with pytest.raises(RuntimeError):
            with database.transaction():
                reports.insert(1, make_report(1))
                raise RuntimeError("boom")

        assert reports.get(1) is None

    def test_count_and_membership_failures_are_storage_errors(self, reports, database):
        database.execute("DROP TABLE stable_entries")

        with pytest.raises(StorageError):
            len(reports)
        with pytest.raises(StorageError):
            1 in reports


class TestDurability:
    def test_values_survive_reopening_the_database(self, app_settings):
        database = open_database(app_settings.database_url)
        StableMemory(database).map(1, RecordCodec(FoundReport, 512)).insert(42, make_report(42))
        database.close()

        reopened = open_database(app_settings.database_url)
        try:
            restored = StableMemory(reopened).map(1, RecordCodec(FoundReport, 512))
            assert restored.get(42) == make_report(42)
        finally:
            reopened.close()


class TestStableCell:
    def test_cell_defaults_to_initial_value(self, memory):
        assert memory.cell(0, initial=0).get() == 0

    def test_set_returns_previous_value(self, memory):
        cell = memory.cell(0)

        assert cell.set(5) == 0
        assert cell.set(9) == 5
        assert cell.get() == 9
