"""User service — registration and credential checks.

Learn: The users collection is scanned in full to enforce unique emails
(exact, case-sensitive match). Password hashing is CPU-bound, so it runs
in a worker thread to keep the event loop free.

Unknown email and wrong password raise the same InvalidCredentialsError,
so login responses never reveal which emails are registered.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog

from tasktrack.auth.password import hash_password, verify_password
from tasktrack.store.base import CollectionStore, Record

logger = structlog.get_logger()


class DuplicateUserError(Exception):
    """Raised when registering an email that already exists."""


class InvalidCredentialsError(Exception):
    """Raised when login email/password don't match a user."""


class UserService:
    """Business logic for user accounts."""

    def __init__(self, store: CollectionStore):
        self.store = store

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        last_name: Optional[str] = None,
    ) -> Record:
        """Create a new user with a bcrypt-hashed password.

        Learn: The early find() skips the bcrypt cost for an obvious
        duplicate. The insert itself re-checks the email under the store
        lock, so two concurrent sign-ups with one email can't both land.
        """

        def same_email(u: Record) -> bool:
            return u.get("email") == email

        if await self.store.find(same_email):
            raise DuplicateUserError("User already exists")

        password_hash = await asyncio.to_thread(hash_password, password)
        user = {
            "id": str(uuid.uuid4()),
            "name": name,
            "lastName": last_name,
            "email": email,
            "password": password_hash,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        if not await self.store.insert_unique(user, same_email):
            raise DuplicateUserError("User already exists")
        logger.info("users.registered", user_id=user["id"])
        return user

    async def authenticate(self, email: str, password: str) -> Record:
        """Return the user for valid credentials, else raise InvalidCredentialsError."""
        user = await self.store.find(lambda u: u.get("email") == email)
        if not user:
            raise InvalidCredentialsError("Invalid credentials")

        ok = await asyncio.to_thread(verify_password, password, user.get("password", ""))
        if not ok:
            raise InvalidCredentialsError("Invalid credentials")
        return user

    async def get_user(self, user_id: str) -> Optional[Record]:
        return await self.store.get(user_id)
