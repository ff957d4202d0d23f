"""
Verification of SSO-issued JWT access tokens.

Tokens are minted by the external SSO service; this module only checks the
signature and expiry and reads the ``sub`` / ``role`` claims.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

VALID_ROLES = {"admin", "manager", "hrd", "coordinator", "task"}

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if the token is valid and carries a known role, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("role") not in VALID_ROLES:
        return None
    return payload


def create_access_token(
    subject: str | Any,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a token the way the SSO service does. Used by tests and local tooling."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "role": role},
        _SECRET,
        algorithm=_ALGORITHM,
    )
