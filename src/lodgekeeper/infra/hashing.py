"""Identifier and capability-token utilities.

Security:
- Capability tokens are random, 30 lowercase alphanumerics
- Only an HMAC-SHA256 hash of a token is ever persisted
- Secret key required from environment
"""

import base64
import hashlib
import hmac
import os
import secrets
import string

_UPPER_ALNUM = string.ascii_uppercase + string.digits
_LOWER_ALNUM = string.ascii_lowercase + string.digits

CAPABILITY_TOKEN_LENGTH = 30


def _get_token_hash_secret() -> bytes:
    """Get HMAC secret for capability token hashing.

    Raises:
        RuntimeError: If TOKEN_HASH_SECRET is not configured.
    """
    secret = os.environ.get("TOKEN_HASH_SECRET")
    if not secret:
        raise RuntimeError(
            "TOKEN_HASH_SECRET not configured. "
            "Generate with: openssl rand -hex 32"
        )
    return secret.encode()


def _random(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_booking_id() -> str:
    """Booking id: "BK" followed by 13 uppercase alphanumerics."""
    return "BK" + _random(_UPPER_ALNUM, 13)


def generate_hold_id() -> str:
    return "HLD" + _random(_UPPER_ALNUM, 12)


def generate_group_id() -> str:
    return "GRP" + _random(_UPPER_ALNUM, 12)


def generate_capability_token() -> str:
    return _random(_LOWER_ALNUM, CAPABILITY_TOKEN_LENGTH)


def hash_token(booking_id: str, token: str) -> str:
    """Hash a capability token bound to its booking.

    Args:
        booking_id: Booking the token grants access to.
        token: Raw capability token. NEVER logged or stored.

    Returns:
        Base64url-encoded HMAC hash (no padding).
    """
    secret = _get_token_hash_secret()
    message = f"{booking_id}|{token}".encode()
    digest = hmac.new(secret, message, hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


def verify_token(booking_id: str, token: str | None, token_hash: str) -> bool:
    """Constant-time check of a presented token against the stored hash."""
    if not token:
        return False
    return hmac.compare_digest(hash_token(booking_id, token), token_hash)
