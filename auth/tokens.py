"""
auth/tokens.py -- JWT encode/decode and password hashing primitives.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the principal id (pid), the
       principal's stable identity field (sub: username for administrators,
       email for users), a random jti, iat and exp. The signature covers all
       of them, so a leaked id alone is not enough to forge a session.
       decode_access_token() returns None on any failure -- the session layer
       turns that into Unauthorized.

       The jti claim makes every issued token distinct even when the same
       principal logs in twice within one second; without it both logins
       would produce byte-identical tokens and logging out one device would
       silently log out the other.

  Passwords: bcrypt directly, cost factor from Settings.bcrypt_rounds.
       _DUMMY_HASH enables timing equalization in the credential store so
       response time does not reveal whether an email exists.

Layer rule: no imports from api/, locations/, products/, or orders/. Import
from core/ is allowed.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings
from core.errors import BadRequest

logger = logging.getLogger("billboard.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt refuses input longer than MAX_PASSWORD_BYTES once UTF-8 encoded;
    that is a caller error, reported as BadRequest.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise BadRequest(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    try:
        return bcrypt.hashpw(encoded, salt).decode("utf-8")
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# Computed once at import so the first failed login is not measurably slower.
_DUMMY_HASH: str = hash_password("billboard_timing_dummy")


def verify_dummy(plain: str) -> None:
    """Burn one bcrypt verification against a hash nobody owns."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(principal_id: int, identity: str, secret_key: str, expire_seconds: int) -> str:
    """Encode a signed JWT for one principal.

    Args:
        principal_id:   Database id of the administrator or user.
        identity:       Stable secondary identity (username or email).
        secret_key:     HS256 signing secret.
        expire_seconds: Token lifetime.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": identity,
        "pid": principal_id,
        "jti": secrets.token_hex(8),
        "iat": now,
        "exp": now + timedelta(seconds=expire_seconds),
    }
    return jwt.encode(payload, secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> dict | None:
    """Verify signature and expiry. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload.get("pid"), int) or not isinstance(payload.get("sub"), str):
        return None
    return payload
