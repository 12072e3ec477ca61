"""Durable key-value devices for the persisted state blob."""

import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Protocol

from signal2noise.core.errors import StorageError


logger = logging.getLogger(__name__)


class BlobStorage(Protocol):
    """A local device that stores one opaque blob under a fixed key."""

    def read_blob(self) -> bytes | None:
        """Return the stored blob, or None when nothing has been saved yet.

        Raises:
            StorageError: If the device cannot be read
        """
        ...

    def write_blob(self, data: bytes) -> None:
        """Replace the stored blob.

        Raises:
            StorageError: If the device cannot be written
        """
        ...


class FileBlobStorage:
    """Blob storage backed by a single JSON file in a data directory."""

    def __init__(self, directory: Path, key: str) -> None:
        """Initialize file storage.

        Args:
            directory: Directory holding the blob file (created on first write)
            key: Storage key, used as the file stem
        """
        self._directory = Path(directory).expanduser()
        self._key = key

    @property
    def path(self) -> Path:
        return self._directory / f"{self._key}.json"

    def read_blob(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            logger.debug("No saved state at %s", self.path)
            return None
        except OSError as e:
            msg = f"Failed to read {self.path}: {e}"
            raise StorageError(msg) from e

    def write_blob(self, data: bytes) -> None:
        tmp_name: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            # Readers only ever see a complete blob: write a sibling temp file, then rename
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{self._key}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            msg = f"Failed to write {self.path}: {e}"
            raise StorageError(msg) from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)


class InMemoryBlobStorage:
    """Thread-safe in-memory blob storage with failure injection."""

    def __init__(self, initial: bytes | None = None) -> None:
        """Initialize in-memory storage, optionally pre-loaded with a blob."""
        self._data = initial
        self._lock = threading.Lock()
        self.fail_reads = False
        self.fail_writes = False

        # Health tracking
        self._last_successful_operation: float | None = None
        self._total_operations = 0
        self.write_count = 0

    def get_health_status(self) -> dict[str, Any]:
        """Get storage health status.

        Returns:
            Dict with availability flags, last successful operation and total operations
        """
        return {
            "readable": not self.fail_reads,
            "writable": not self.fail_writes,
            "last_successful_operation": self._last_successful_operation,
            "total_operations": self._total_operations,
            "stored_bytes": len(self._data) if self._data is not None else 0,
        }

    def _record_success(self) -> None:
        """Record successful storage operation."""
        self._last_successful_operation = time.time()
        self._total_operations += 1

    def read_blob(self) -> bytes | None:
        with self._lock:
            if self.fail_reads:
                raise StorageError("In-memory storage device unavailable")
            self._record_success()
            return self._data

    def write_blob(self, data: bytes) -> None:
        with self._lock:
            if self.fail_writes:
                raise StorageError("In-memory storage quota exceeded")
            self._data = bytes(data)
            self.write_count += 1
            self._record_success()
