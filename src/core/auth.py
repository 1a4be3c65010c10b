"""Bearer-token helpers.

Tokens are HS256 JWTs issued for a login account. The ``roles`` claim is checked
against ``Settings.allowed_roles`` on both issue and decode.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import jwt
from src.core.config import Settings, get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


def create_access_token(
    subject: str,
    *,
    roles: Sequence[str],
    email: str | None = None,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign an access token for ``subject`` (the login account id)."""
    settings = get_settings()
    _check_roles(roles, settings)

    issued_at = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    claims: dict[str, Any] = {
        "sub": subject,
        "roles": list(roles),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
        "iss": settings.app_name,
    }
    claims.update({key: value for key, value in (("email", email), ("name", name)) if value})

    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and issuer; return the claims."""
    settings = get_settings()

    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise TokenError("Invalid token") from exc

    _check_roles(claims.get("roles", []), settings)
    return claims


def _check_roles(roles: Iterable[str], settings: Settings) -> None:
    unknown = [role for role in roles if role not in settings.allowed_roles]
    if unknown:
        raise TokenError(f"Unsupported role(s): {', '.join(unknown)}")
