"""Password hashing utilities.

Learn: Uses bcrypt for password hashing. bcrypt generates and embeds a
random salt in every hash (hashes start with "$2b$"), so two users with
the same password never share a hash. The cost factor comes from
settings.bcrypt_rounds (default 10, roughly 60ms per hash).
"""

from typing import Optional

import bcrypt

from tasktrack.config import settings

# bcrypt only looks at the first 72 bytes of the password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt."""
    pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash.

    Malformed or empty hashes fail verification instead of raising.
    """
    if not password_hash:
        return False
    try:
        pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
