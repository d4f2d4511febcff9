"""Unit tests for the local record store."""
import json
import os
from dataclasses import replace
from unittest.mock import patch

import pytest

from registration_portal.services.storage_service import (
    LocalRecordStore,
    decode_collection,
    encode_collection,
)
from registration_portal.utils.exceptions import StorageCorrupt, StorageUnavailable


class TestDecodeCollection:
    """Test deserialization of the stored array."""

    def test_blank_text_is_empty(self):
        assert decode_collection("") == []
        assert decode_collection("  \n") == []

    def test_malformed_json_raises(self):
        with pytest.raises(StorageCorrupt, match="Malformed JSON"):
            decode_collection("[{broken")

    def test_non_array_raises(self):
        with pytest.raises(StorageCorrupt, match="Expected a JSON array"):
            decode_collection('{"students": []}')

    def test_non_object_entries_raise(self):
        with pytest.raises(StorageCorrupt):
            decode_collection('[1, 2, 3]')

    def test_encoded_collection_decodes(self, sample_record):
        assert decode_collection(encode_collection([sample_record])) == [sample_record]


class TestLocalRecordStore:
    """Test load/append/clear on the JSON-backed store."""

    def test_missing_file_loads_empty(self, store):
        assert store.load() == []
        assert store.count() == 0

    def test_append_then_load_round_trip(self, store, sample_record):
        """Appending to an empty store yields a one-element collection."""
        store.append(sample_record)

        assert store.load() == [sample_record]
        assert os.path.exists(store.file_path)

    def test_append_preserves_insertion_order(self, store, sample_record):
        second = replace(sample_record, id="AIMS00000002", full_name="Grace Hopper")
        third = replace(sample_record, id="AIMS00000003", full_name="Emmy Noether")

        store.append(sample_record)
        store.append(second)
        store.append(third)

        assert [r.id for r in store.load()] == [sample_record.id, "AIMS00000002", "AIMS00000003"]

    def test_file_holds_json_array_with_sheet_keys(self, store, sample_record):
        store.append(sample_record)

        with open(store.file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        assert isinstance(data, list)
        assert data[0]["email"] == "ada@x.com"
        assert data[0]["interests"] == "Not specified"

    def test_corrupt_file_loads_empty(self, store, caplog):
        """Corruption is treated as an empty collection and logged."""
        os.makedirs(os.path.dirname(store.file_path), exist_ok=True)
        with open(store.file_path, "w", encoding="utf-8") as f:
            f.write("not json at all")

        assert store.load() == []
        assert "corrupt" in caplog.text

    def test_append_over_corrupt_file_starts_fresh(self, store, sample_record):
        os.makedirs(os.path.dirname(store.file_path), exist_ok=True)
        with open(store.file_path, "w", encoding="utf-8") as f:
            f.write("{oops")

        store.append(sample_record)

        assert store.load() == [sample_record]

    def test_clear_requires_confirmation(self, store, sample_record):
        store.append(sample_record)

        assert store.clear() is False
        assert store.clear(confirmed=False) is False
        assert store.count() == 1

    def test_clear_with_confirmation_empties_store(self, store, sample_record):
        store.append(sample_record)

        assert store.clear(confirmed=True) is True
        assert store.load() == []

    def test_clear_on_missing_file_succeeds(self, store):
        assert store.clear(confirmed=True) is True

    def test_append_write_failure_raises_storage_unavailable(self, store, sample_record):
        """OS errors while writing surface as StorageUnavailable."""
        with patch(
            "registration_portal.services.storage_service.os.replace",
            side_effect=PermissionError("read-only"),
        ):
            with pytest.raises(StorageUnavailable, match="Cannot write"):
                store.append(sample_record)

        assert store.load() == []

    def test_unwritable_directory_raises_storage_unavailable(self, tmp_path, sample_record):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        broken = LocalRecordStore(str(blocker / "registrations.json"))

        with pytest.raises(StorageUnavailable):
            broken.append(sample_record)
