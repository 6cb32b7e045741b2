"""
Password hashing, admin authentication and callback signature checks.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import os

import bcrypt
import structlog
from fastapi import HTTPException, Request, status

from car_rental import config

logger = structlog.get_logger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

SIGNATURE_HEADER = "X-Signature"


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain-text password

    Returns:
        str: bcrypt hash
    """
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a password against a stored bcrypt hash.

    Args:
        password: Plain-text password
        password_hash: Stored bcrypt hash

    Returns:
        bool: True if the password matches
    """
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
        )
    except ValueError:
        logger.warning("invalid_password_hash_format")
        return False


def validate_basic_auth(auth_header: str | None) -> bool:
    """
    Validate HTTP Basic Auth credentials against the admin credentials.

    Args:
        auth_header: Authorization header value (e.g., "Basic dXNlcjpwYXNz")

    Returns:
        bool: True if credentials match, False otherwise (including when no
        admin credentials are configured)
    """
    if not config.ADMIN_USERNAME or not config.ADMIN_PASSWORD:
        return False
    if not auth_header or not auth_header.startswith("Basic "):
        return False

    try:
        encoded_credentials = auth_header.replace("Basic ", "", 1)
        decoded_credentials = base64.b64decode(encoded_credentials).decode("utf-8")
        username, password = decoded_credentials.split(":", 1)
    except Exception:
        logger.exception("basic_auth_decode_failed")
        return False

    return hmac.compare_digest(username, config.ADMIN_USERNAME) and hmac.compare_digest(
        password, config.ADMIN_PASSWORD
    )


def require_admin(request: Request) -> None:
    """
    FastAPI dependency guarding back-office routes.

    Raises:
        HTTPException: 401 with a Basic challenge when credentials are missing or wrong
    """
    if not validate_basic_auth(request.headers.get("Authorization")):
        logger.warning("admin_auth_failed", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )


def get_callback_secret() -> str | None:
    return os.getenv("PAYMENT_CALLBACK_SECRET")


def sign_payload(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of a request body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None) -> bool:
    """
    Verify the HMAC-SHA256 signature of a gateway callback body.

    Args:
        body: Raw request body
        signature: Hex digest from the X-Signature header

    Returns:
        bool: True if the signature matches; False when it does not or no
        secret is configured
    """
    secret = get_callback_secret()
    if not secret:
        logger.error("payment_callback_secret_not_configured")
        return False
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(secret, body), signature.strip().lower())
