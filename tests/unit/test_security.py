"""
Unit tests for password hashing, admin Basic auth and callback signatures.
"""

from __future__ import annotations

import base64
import os
from unittest.mock import patch

import pytest

from car_rental.security import (
    hash_password,
    sign_payload,
    validate_basic_auth,
    verify_password,
    verify_signature,
)


def basic(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


@pytest.mark.unit
def test_hash_and_verify_password() -> None:
    """Test that a bcrypt hash verifies only the original password."""
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


@pytest.mark.unit
def test_verify_password_with_malformed_hash() -> None:
    """Test that a corrupt stored hash is treated as a mismatch."""
    assert verify_password("anything", "not-a-bcrypt-hash") is False


@pytest.mark.unit
@patch("car_rental.security.config")
def test_validate_basic_auth(mock_config: object) -> None:
    """Test that only the configured admin credentials pass."""
    mock_config.ADMIN_USERNAME = "admin"  # type: ignore[attr-defined]
    mock_config.ADMIN_PASSWORD = "pw"  # type: ignore[attr-defined]

    assert validate_basic_auth(basic("admin", "pw"))
    assert not validate_basic_auth(basic("admin", "nope"))
    assert not validate_basic_auth(None)
    assert not validate_basic_auth("Bearer token")
    assert not validate_basic_auth("Basic !!!not-base64!!!")


@pytest.mark.unit
@patch("car_rental.security.config")
def test_validate_basic_auth_without_configured_credentials(mock_config: object) -> None:
    """Test that admin routes stay locked when no credentials are configured."""
    mock_config.ADMIN_USERNAME = None  # type: ignore[attr-defined]
    mock_config.ADMIN_PASSWORD = None  # type: ignore[attr-defined]

    assert not validate_basic_auth(basic("admin", "pw"))


@pytest.mark.unit
def test_verify_signature_accepts_matching_hmac() -> None:
    """Test that a body signed with the shared secret verifies."""
    body = b'{"bookingId": "b-1", "orderId": "o-1", "orderStatus": 2}'

    with patch.dict(os.environ, {"PAYMENT_CALLBACK_SECRET": "shh"}):
        signature = sign_payload("shh", body)
        assert verify_signature(body, signature)
        assert verify_signature(body, signature.upper())
        assert not verify_signature(body + b" ", signature)
        assert not verify_signature(body, None)


@pytest.mark.unit
def test_verify_signature_without_secret() -> None:
    """Test that callbacks are rejected when no secret is configured."""
    body = b"{}"

    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop("PAYMENT_CALLBACK_SECRET", None)
        assert not verify_signature(body, sign_payload("anything", body))
