"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The access
token carries the user id (`sub`) and display name, so protected routes
never need a user lookup. Tokens are HS256-signed with settings.jwt_secret
and expire after settings.access_token_expire_minutes (default 60).

The verifier distinguishes expired tokens from every other failure so the
caller can report them separately if it wants to.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasktrack.config import settings

ACCESS_TOKEN_TYPE = "access"


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenExpiredError(TokenError):
    """The token signature is valid but its `exp` has passed."""


class TokenInvalidError(TokenError):
    """Bad signature, wrong algorithm, missing claims, or not a JWT at all."""


@dataclass(frozen=True)
class TokenClaims:
    """Verified identity claim carried by an access token."""

    user_id: str
    name: str
    issued_at: datetime
    expires_at: datetime


def create_access_token(
    user_id: str,
    name: str = "",
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed JWT access token for a user."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes if expires_minutes is not None
        else settings.access_token_expire_minutes
    )
    payload = {
        "sub": str(user_id),
        "name": name,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenClaims:
    """Verify and decode an access token.

    Returns the claims on success.
    Raises TokenExpiredError or TokenInvalidError on failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenInvalidError("Not an access token")

    return TokenClaims(
        user_id=payload["sub"],
        name=payload.get("name", ""),
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
