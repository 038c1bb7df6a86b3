"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract and
validate the current user from the `Authorization: Bearer <token>` header.

Two distinct rejections:
- 401: no token presented at all (anonymous caller)
- 403: a token was presented but is invalid or expired

Clients use the 403 to drop their stored token and send the user back
to the login screen.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException

from tasktrack.auth.jwt import TokenError, TokenExpiredError, verify_token

logger = structlog.get_logger()

BEARER_SCHEME = "Bearer"


class CurrentIdentity:
    """Represents the authenticated user making the request.

    Learn: This is the unified auth context. All task operations use
    user_id to scope reads and writes to the caller's own records.
    """

    def __init__(self, user_id: str, name: str = ""):
        self.user_id = user_id
        self.name = name

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r})"


def _missing_token() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Access denied. No token provided.",
        headers={"WWW-Authenticate": BEARER_SCHEME},
    )


def _forbidden() -> HTTPException:
    return HTTPException(status_code=403, detail="Invalid or expired token.")


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
) -> Optional[CurrentIdentity]:
    """Extract current identity (optional — returns None if no token).

    Learn: This is the "soft" auth dependency. A header that carries a
    token still has to verify; only a missing token yields None.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if not token:
        return None

    if scheme != BEARER_SCHEME:
        logger.info("auth.bad_scheme", scheme=scheme)
        raise _forbidden()

    return _authenticate_jwt(token)


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no token)."""
    if not identity:
        raise _missing_token()
    return identity


def _authenticate_jwt(token: str) -> CurrentIdentity:
    """Authenticate via JWT token."""
    try:
        claims = verify_token(token)
    except TokenExpiredError:
        logger.info("auth.token_expired")
        raise _forbidden()
    except TokenError as e:
        logger.info("auth.token_invalid", error=str(e))
        raise _forbidden()

    return CurrentIdentity(user_id=claims.user_id, name=claims.name)
