from __future__ import annotations  # Re-export storage helpers

from .blobs import BlobStore
from .sqlite import SqliteStore, utc_now

__all__ = ["BlobStore", "SqliteStore", "utc_now"]
