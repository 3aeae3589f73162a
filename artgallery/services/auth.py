"""Admin authentication with HS256 bearer tokens."""
from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import Depends, Header, HTTPException

from artgallery.config import Settings, get_settings

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def verify_credentials(email: str, password: str, settings: Settings) -> bool:
    # compare_digest only accepts ASCII str, so compare UTF-8 bytes.
    email_ok = hmac.compare_digest(
        email.strip().lower().encode("utf-8"), settings.admin_email.lower().encode("utf-8")
    )
    password_ok = hmac.compare_digest(password.encode("utf-8"), settings.admin_password.encode("utf-8"))
    return email_ok and password_ok


def create_token(subject: str, settings: Settings, *, role: str = ADMIN_ROLE) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expire_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGORITHM)


def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    """Decode and validate a token.

    Raises
    ------
    jwt.InvalidTokenError
        If the token is expired, malformed or signed with another key.
    """

    return jwt.decode(token, settings.jwt_secret, algorithms=[_ALGORITHM])


def _extract_token(authorization: str | None) -> Optional[str]:
    if not authorization:
        return None
    # Support both "Bearer <token>" and just "<token>"
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return authorization.strip() or None


def require_admin(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    token = _extract_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Not authorized, no token")
    try:
        claims = decode_token(token, settings)
    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.InvalidTokenError as exc:
        logger.warning("Invalid token: %s", exc)
        raise HTTPException(status_code=401, detail="Not authorized, token failed")
    if claims.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=403, detail="Not authorized as admin")
    return claims


def optional_admin(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any] | None:
    """Claims of a valid admin token, or ``None``; never rejects the request."""

    token = _extract_token(authorization)
    if token is None:
        return None
    try:
        claims = decode_token(token, settings)
    except jwt.InvalidTokenError as exc:
        logger.info("Optional auth token invalid: %s", exc)
        return None
    return claims if claims.get("role") == ADMIN_ROLE else None
