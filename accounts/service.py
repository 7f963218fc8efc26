"""Account registration, login and bearer-token identification."""
from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
from typing import Tuple

from config.settings import settings
from errors import AuthError, InterviewError

from .store import UserRecord, UserStore

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 260000


def hash_password(password: str, *, iterations: int = HASH_ITERATIONS) -> str:  # Encode as algorithm$iterations$salt$digest
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return "$".join(
        (
            HASH_ALGORITHM,
            str(iterations),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        )
    )


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt_b64, digest_b64 = encoded.split("$")
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(digest, expected)


class AccountService:  # Thin policy layer over UserStore
    def __init__(self, store: UserStore, *, iterations: int = HASH_ITERATIONS) -> None:
        self._store = store
        self._iterations = iterations

    def register(self, email: str, password: str, name: str) -> Tuple[UserRecord, str]:  # Create account and issue a token
        email = email.strip()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise InterviewError("Please provide a valid email address")
        if not name.strip():
            raise InterviewError("Name is required")
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            raise InterviewError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
        user = self._store.create_user(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password, iterations=self._iterations),
        )
        logger.info("Registered user %s", user.user_id)
        return user, self._issue_token(user)

    def login(self, email: str, password: str) -> Tuple[UserRecord, str]:
        user = self._store.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError("Invalid email or password")
        return user, self._issue_token(user)

    def identify(self, token: str) -> UserRecord:  # Resolve bearer token or raise AuthError
        user = self._store.user_for_token(token) if token else None
        if user is None:
            raise AuthError("Invalid or expired token")
        return user

    def _issue_token(self, user: UserRecord) -> str:
        token = secrets.token_urlsafe(32)
        self._store.save_token(token, user.user_id)
        return token


__all__ = ["AccountService", "hash_password", "verify_password"]
