from __future__ import annotations  # Re-export accounts public API

from .service import AccountService, hash_password, verify_password
from .store import UserRecord, UserStore

__all__ = ["AccountService", "UserRecord", "UserStore", "hash_password", "verify_password"]
