"""Object storage for application attachments."""

from __future__ import annotations

import logging
from pathlib import Path

from vendor_market.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend cannot complete an operation."""


class StorageBackend:
    """Minimal blob store keyed by relative path."""

    def put(self, path: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def get(self, path: str) -> bytes:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Stores objects as files below a root directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if self.root not in full_path.parents:
            raise StorageError(f"Path escapes storage root: {path}")
        return full_path

    def put(self, path: str, data: bytes, content_type: str) -> None:
        full_path = self._resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug(f"[Storage] Stored {path} ({len(data)} bytes, {content_type})")

    def get(self, path: str) -> bytes:
        full_path = self._resolve(path)
        if not full_path.exists():
            raise FileNotFoundError(path)
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def delete(self, path: str) -> None:
        """Remove an object. A missing object is already deleted."""
        full_path = self._resolve(path)
        try:
            full_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()


_default_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    global _default_storage
    if _default_storage is None:
        _default_storage = LocalStorage(settings.STORAGE_DIR)
    return _default_storage
