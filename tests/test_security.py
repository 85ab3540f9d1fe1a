"""Unit tests for password hashing and JWT issuing/verification."""

import jwt as pyjwt
import pytest

from taskflow.auth.jwt import TokenError, create_access_token, verify_token
from taskflow.auth.password import hash_password, verify_password
from taskflow.config import DEFAULT_JWT_SECRET, Settings


# ═══════════════════════════════════════════════════════════
# Passwords
# ═══════════════════════════════════════════════════════════


def test_hash_and_verify_password():
    hashed = hash_password("Password1")
    assert hashed != "Password1"
    assert hashed.startswith("$2b$12$")
    assert verify_password("Password1", hashed)
    assert not verify_password("password1", hashed)


def test_hashes_are_salted():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_against_malformed_hash():
    assert verify_password("Password1", "not-a-bcrypt-hash") is False


# ═══════════════════════════════════════════════════════════
# Tokens
# ═══════════════════════════════════════════════════════════


def test_token_round_trip(settings):
    token = create_access_token("user-1", "user@example.com", settings)
    payload = verify_token(token, settings)
    assert payload["sub"] == "user-1"
    assert payload["email"] == "user@example.com"
    assert payload["exp"] - payload["iat"] == settings.access_token_expire_minutes * 60


def test_token_uses_hs256(settings):
    token = create_access_token("user-1", "user@example.com", settings)
    assert pyjwt.get_unverified_header(token)["alg"] == "HS256"


def test_expired_token(settings):
    token = create_access_token("user-1", "user@example.com", settings, expires_minutes=-1)
    with pytest.raises(TokenError, match="expired"):
        verify_token(token, settings)


def test_wrong_secret(settings):
    other = settings.model_copy(update={"jwt_secret": "another-secret"})
    token = create_access_token("user-1", "user@example.com", other)
    with pytest.raises(TokenError):
        verify_token(token, settings)


def test_token_without_subject(settings):
    token = pyjwt.encode({"exp": 4102444800}, settings.jwt_secret, algorithm="HS256")
    with pytest.raises(TokenError):
        verify_token(token, settings)


def test_garbage_token(settings):
    with pytest.raises(TokenError):
        verify_token("definitely.not.jwt", settings)


# ═══════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════


def test_default_secret_rejected_outside_development():
    with pytest.raises(ValueError, match="TASKFLOW_JWT_SECRET"):
        Settings(environment="production", jwt_secret=DEFAULT_JWT_SECRET)


def test_custom_secret_accepted_in_production():
    s = Settings(environment="production", jwt_secret="a-real-secret")
    assert s.jwt_secret == "a-real-secret"
