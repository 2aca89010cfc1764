"""Tests for PersistenceAdapter and LocalKeyValueStorage."""

import json

import pytest

from agritagger.domain import Feature
from agritagger.services.persistence import PersistenceAdapter, PersistenceWriteError
from agritagger.storage import LocalKeyValueStorage, LocalStorageError
from tests.samples import FIELD_POINT, SMALL_PLOT


def _features():
    return [
        Feature("a1", SMALL_PLOT, {"name": "Lahan 1", "crop": "Padi", "color": "#10b981"}),
        Feature("b2", FIELD_POINT, {"name": "Titik 2", "crop": "Jagung", "color": "#ff0000"}),
    ]


class TestLocalKeyValueStorage:
    """File-per-key storage."""

    def test_read_absent_key(self, storage):
        """Unknown keys read as None."""
        assert storage.read("nothing") is None
        assert storage.exists("nothing") is False

    def test_write_then_read(self, storage):
        """Values round-trip as text."""
        storage.write("agritagger:features", "[]")
        assert storage.read("agritagger:features") == "[]"
        assert storage.path_for("agritagger:features").name == "agritagger_features.json"

    def test_overwrite_leaves_no_temp_files(self, storage, tmp_path):
        """Writes replace the value without leaving temporary files."""
        storage.write("k", "one")
        storage.write("k", "two")
        assert storage.read("k") == "two"
        assert [p.name for p in (tmp_path / "storage").iterdir()] == ["k.json"]

    def test_rejects_empty_key(self, storage):
        """A key with no usable characters is refused."""
        with pytest.raises(LocalStorageError):
            storage.write("///", "x")


class TestPersistenceAdapter:
    """Whole-document load/save."""

    def test_save_then_load(self, persistence):
        """A saved snapshot loads back with ids, geometry and properties."""
        persistence.save(_features())
        assert persistence.load() == _features()

    def test_saved_shape(self, persistence, storage):
        """The blob is an array of {id, geometry, properties}."""
        persistence.save(_features())
        records = json.loads(storage.read("agritagger:features"))
        assert records[0] == {"id": "a1", "geometry": SMALL_PLOT, "properties": _features()[0].attributes}

    def test_absent_blob_is_empty(self, persistence):
        """Nothing saved yet means an empty store."""
        assert persistence.load() == []

    @pytest.mark.parametrize("blob", [
        "{not json",
        "",
        '{"id": "a"}',
        '[{"id": "a"}]',
        '[{"id": 5, "geometry": {"type": "Point", "coordinates": [0, 0]}}]',
        '[{"id": "a", "geometry": {"type": "Point", "coordinates": [0, 0]}, "properties": []}]',
        '[{"id": "a", "geometry": {"type": "Point", "coordinates": [0, 0]}},'
        ' {"id": "a", "geometry": {"type": "Point", "coordinates": [1, 1]}}]',
    ])
    def test_corrupt_blob_is_empty(self, persistence, storage, blob):
        """Corrupt persisted state never raises."""
        storage.write("agritagger:features", blob)
        assert persistence.load() == []

    def test_write_failure_raises(self, tmp_path):
        """Storage write errors surface as PersistenceWriteError."""

        class BrokenStorage:
            def read(self, key):
                return None

            def write(self, key, value):
                raise LocalStorageError("disk full")

            def exists(self, key):
                return False

        adapter = PersistenceAdapter(BrokenStorage())
        with pytest.raises(PersistenceWriteError):
            adapter.save(_features())

    def test_unreadable_blob_is_empty(self, tmp_path):
        """A read error is treated like corruption."""
        storage = LocalKeyValueStorage(tmp_path / "s")
        storage.path_for("agritagger:features").write_bytes(b"\xff\xfe\xfa")
        assert PersistenceAdapter(storage).load() == []
