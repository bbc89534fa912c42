"""
File storage for consent documents.
"""

import os
from pathlib import Path

from camp_portal.config import CONSENT_STORAGE_DIR
from camp_portal.errors import StoreError


class LocalBlobStore:
    """Blob store backed by a directory on the local filesystem."""

    def __init__(self, root):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise StoreError(f"Invalid storage path: {path}")
        return target

    def upload(self, path: str, data: bytes, content_type: str = "", overwrite: bool = False) -> str:
        """Store *data* under *path* and return the stored path."""
        target = self._resolve(path)
        if target.exists() and not overwrite:
            raise StoreError(f"The resource already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StoreError(f"Failed to upload consent form: {e}") from e
        return path

    def read(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.exists():
            raise StoreError(f"Object not found: {path}")
        return target.read_bytes()


def init_blob_store(root=None) -> LocalBlobStore:
    root = root or CONSENT_STORAGE_DIR
    os.makedirs(root, exist_ok=True)
    print(f"[init] Consent storage at {os.path.abspath(root)}")
    return LocalBlobStore(root)
