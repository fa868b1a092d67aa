from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.core.security import (
    ACCESS_TOKEN_TYPE,
    PASSWORD_RESET_TOKEN_TYPE,
    create_access_token,
    create_password_reset_token,
    decode_token,
    get_password_hash,
    get_token_user_id,
    verify_password,
)
from app.models.user import UserRole


def make_principal(**overrides):
    values = {"id": 7, "email": "someone@example.com", "role": UserRole.MODERATOR}
    values.update(overrides)
    return SimpleNamespace(**values)


def test_password_hash_is_not_plaintext_and_verifies():
    hashed = get_password_hash("Secret123")

    assert hashed != "Secret123"
    assert verify_password("Secret123", hashed)
    assert not verify_password("secret123", hashed)


def test_access_token_carries_identity_claims():
    token = create_access_token(make_principal())
    payload = decode_token(token)

    assert payload["sub"] == "7"
    assert payload["email"] == "someone@example.com"
    assert payload["role"] == "moderator"
    assert payload["type"] == ACCESS_TOKEN_TYPE
    assert get_token_user_id(payload) == 7


def test_expired_token_is_reported_as_expired():
    token = create_access_token(make_principal(), expires_delta=timedelta(seconds=-1))

    with pytest.raises(UnauthorizedError) as exc_info:
        decode_token(token)
    assert exc_info.value.message == "Token expired"


def test_token_signed_with_other_key_is_invalid():
    token = jwt.encode({"sub": "1", "type": ACCESS_TOKEN_TYPE}, "another-key", algorithm=settings.ALGORITHM)

    with pytest.raises(UnauthorizedError) as exc_info:
        decode_token(token)
    assert exc_info.value.message == "Invalid token"


def test_garbage_token_is_invalid():
    with pytest.raises(UnauthorizedError):
        decode_token("not-a-jwt")


def test_reset_token_cannot_be_used_as_access_token():
    token = create_password_reset_token(3)

    with pytest.raises(UnauthorizedError):
        decode_token(token)
    assert decode_token(token, expected_type=PASSWORD_RESET_TOKEN_TYPE)["sub"] == "3"


def test_access_token_cannot_be_used_for_password_reset():
    token = create_access_token(make_principal())

    with pytest.raises(UnauthorizedError):
        decode_token(token, expected_type=PASSWORD_RESET_TOKEN_TYPE)


def test_non_numeric_subject_is_invalid():
    with pytest.raises(UnauthorizedError):
        get_token_user_id({"sub": "abc"})
