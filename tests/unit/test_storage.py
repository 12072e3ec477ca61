"""Unit tests for blob storage devices."""

import pytest

from signal2noise.core.errors import StorageError
from signal2noise.core.storage import FileBlobStorage, InMemoryBlobStorage


@pytest.mark.unit
class TestFileBlobStorage:
    """Tests for FileBlobStorage."""

    def test_read_missing_returns_none(self, tmp_path):
        storage = FileBlobStorage(tmp_path / "data", "s2n-app-state")

        assert storage.read_blob() is None

    def test_write_then_read(self, tmp_path):
        storage = FileBlobStorage(tmp_path / "data", "s2n-app-state")

        storage.write_blob(b'{"isLocked": true}')

        assert storage.read_blob() == b'{"isLocked": true}'
        assert storage.path == tmp_path / "data" / "s2n-app-state.json"

    def test_write_replaces_previous_blob_without_leftovers(self, tmp_path):
        storage = FileBlobStorage(tmp_path, "state")

        storage.write_blob(b"first")
        storage.write_blob(b"second")

        assert storage.read_blob() == b"second"
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")
        storage = FileBlobStorage(blocker, "state")

        with pytest.raises(StorageError, match="Failed to write"):
            storage.write_blob(b"{}")

    def test_read_failure_raises_storage_error(self, tmp_path):
        (tmp_path / "state.json").mkdir()
        storage = FileBlobStorage(tmp_path, "state")

        with pytest.raises(StorageError, match="Failed to read"):
            storage.read_blob()


@pytest.mark.unit
class TestInMemoryBlobStorage:
    """Tests for InMemoryBlobStorage."""

    def test_initial_blob(self):
        assert InMemoryBlobStorage(b"abc").read_blob() == b"abc"

    def test_failure_injection(self):
        storage = InMemoryBlobStorage()
        storage.fail_writes = True

        with pytest.raises(StorageError):
            storage.write_blob(b"x")

        storage.fail_reads = True
        with pytest.raises(StorageError):
            storage.read_blob()

    def test_health_status(self):
        storage = InMemoryBlobStorage()
        storage.write_blob(b"12345")

        status = storage.get_health_status()

        assert status["writable"] is True
        assert status["stored_bytes"] == 5
        assert status["total_operations"] == 1
