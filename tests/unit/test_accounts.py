"""Tests for account registration, login and token lookup."""
from __future__ import annotations

import pytest

from accounts import AccountService, UserStore, hash_password, verify_password
from errors import AuthError, DuplicateAccount, InterviewError


@pytest.fixture
def accounts(tmp_db):
    return AccountService(UserStore(tmp_db), iterations=1000)


def test_password_hash_round_trip():
    encoded = hash_password("secret123", iterations=1000)
    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert verify_password("secret123", encoded)
    assert not verify_password("secret124", encoded)
    assert not verify_password("secret123", "garbage")


def test_register_then_identify(accounts):
    user, token = accounts.register(" Ada@Example.com ", "secret123", " Ada ")
    assert user.email == "ada@example.com"
    assert user.name == "Ada"
    assert accounts.identify(token).user_id == user.user_id


def test_login_is_case_insensitive_and_issues_new_token(accounts):
    user, first = accounts.register("ada@example.com", "secret123", "Ada")
    again, second = accounts.login("ADA@example.com", "secret123")
    assert again.user_id == user.user_id
    assert second != first
    assert accounts.identify(first).user_id == user.user_id


def test_wrong_credentials(accounts):
    accounts.register("ada@example.com", "secret123", "Ada")
    with pytest.raises(AuthError):
        accounts.login("ada@example.com", "wrong-password")
    with pytest.raises(AuthError):
        accounts.login("nobody@example.com", "secret123")
    with pytest.raises(AuthError):
        accounts.identify("not-a-token")


def test_duplicate_email(accounts):
    accounts.register("ada@example.com", "secret123", "Ada")
    with pytest.raises(DuplicateAccount):
        accounts.register("ADA@example.com", "other-pass", "Ada Again")


@pytest.mark.parametrize(
    ("email", "password", "name"),
    [("not-an-email", "secret123", "Ada"), ("ada@example.com", "short", "Ada"), ("ada@example.com", "secret123", " ")],
)
def test_register_validation(accounts, email, password, name):
    with pytest.raises(InterviewError) as excinfo:
        accounts.register(email, password, name)
    assert excinfo.value.status_code == 400
