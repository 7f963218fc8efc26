from __future__ import annotations  # Local directory blob store for uploaded documents and media

import logging
from pathlib import Path
from typing import Union
from uuid import uuid4

from errors import NotFound

logger = logging.getLogger(__name__)


class BlobStore:  # Stores raw bytes under generated names and hands back a reference
    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    def put(self, data: bytes, suffix: str = "") -> str:  # Write bytes and return the blob reference
        if suffix and not suffix.startswith("."):
            suffix = f".{suffix}"
        ref = f"{uuid4().hex}{suffix}"
        self._root.mkdir(parents=True, exist_ok=True)
        (self._root / ref).write_bytes(data)
        return ref

    def read(self, ref: str) -> bytes:
        path = self._resolve(ref)
        if not path.is_file():
            raise NotFound(f"Blob '{ref}' not found")
        return path.read_bytes()

    def delete(self, ref: str) -> bool:  # Remove a blob; missing blobs are ignored
        path = self._resolve(ref)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Unable to delete blob %s: %s", ref, exc)
            return False
        return True

    def _resolve(self, ref: str) -> Path:  # Map a reference to a path inside the root only
        name = Path(ref).name
        if not name or name != ref:
            raise NotFound(f"Blob '{ref}' not found")
        return self._root / name


__all__ = ["BlobStore"]
