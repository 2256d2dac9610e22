"""
Key-value blob stores backing the snapshot slots.

A blob store maps a string key to an opaque byte string.  DirectoryBlobStore
keeps one file per key; MemoryBlobStore is used by tests and by callers that
do not want anything on disk.
"""

from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol

from ..core.config import BLOB_SUFFIX


class BlobStore(Protocol):
    """Minimal key-value contract needed by SnapshotStore."""

    def get(self, key: str) -> bytes | None:
        """Return the bytes stored under key, or None if never written."""
        ...

    def set(self, key: str, data: bytes) -> None:
        """Store data under key, replacing any previous value."""
        ...


class MemoryBlobStore:
    """In-process blob store."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self.blobs: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self.blobs.get(key)

    def set(self, key: str, data: bytes) -> None:
        self.blobs[key] = data


class DirectoryBlobStore:
    """
    File-per-key blob store.

    Each key is written to ``<directory>/<key>.json``.  Writes go to a
    temporary file in the same directory which then replaces the target, so a
    crash mid-write never leaves a half-written slot.
    """

    def __init__(self, directory: str | Path):
        """
        Initialize the blob store.

        Args:
            directory: Directory holding one file per key (created on first write)
        """
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """Return the file path used for key."""
        return self.directory / f"{key}{BLOB_SUFFIX}"

    def exists(self) -> bool:
        """Check if the data directory exists."""
        return self.directory.is_dir()

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        with NamedTemporaryFile("wb", dir=self.directory, delete=False) as tmp:
            temp_path = Path(tmp.name)
            try:
                tmp.write(data)
            except BaseException:
                tmp.close()
                temp_path.unlink(missing_ok=True)
                raise
        temp_path.replace(target)
