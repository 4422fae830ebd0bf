"""Local account and session profile.

A single registered account is kept under ``user``; the logged-in
identity is mirrored into ``userEmail``/``userName``/``userDisability``
so other parts of the app can read it without decoding the account. The
email doubles as the voter identifier for usefulness votes.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import bcrypt
from pydantic import BaseModel

from rampa.core.errors import AuthenticationError, DecodeError, ValidationError

if TYPE_CHECKING:
    from rampa.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

ACCOUNT_KEY = "user"
EMAIL_KEY = "userEmail"
NAME_KEY = "userName"
DISABILITY_KEY = "userDisability"
LOGGED_IN_KEY = "hasLoggedIn"

DEFAULT_NAME = "Usuário"


class UserProfile(BaseModel):
    """The identity shown on the profile screen."""

    email: str
    name: str
    disability: str = ""


class _Account(BaseModel):
    name: str
    email: str
    password_hash: str
    disability: str = ""


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against hash."""
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def _valid_email(email: str) -> bool:
    return "@" in email and "." in email


class ProfileStore:
    """Register, log in and edit the local user profile."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def _account(self) -> _Account | None:
        raw = await self._store.get(ACCOUNT_KEY)
        if raw is None:
            return None
        try:
            return _Account.model_validate(json.loads(raw))
        except ValueError as e:
            logger.warning("%s", DecodeError(ACCOUNT_KEY, f"unreadable account: {e}"))
            return None

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        disability: str = "",
    ) -> UserProfile:
        """Create (or replace) the local account.

        Raises ValidationError on a blank name, malformed email, blank
        password or mismatched confirmation.
        """
        if not name.strip():
            raise ValidationError("Name is required")
        email = email.strip()
        if not _valid_email(email):
            raise ValidationError("A valid email is required")
        if not password.strip():
            raise ValidationError("Password is required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        account = _Account(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            disability=disability.strip(),
        )
        await self._store.set(ACCOUNT_KEY, account.model_dump_json())
        logger.info("Registered account %s", email)
        return UserProfile(
            email=email, name=account.name, disability=account.disability
        )

    async def login(self, email: str, password: str) -> UserProfile:
        """Start a session for the registered account.

        Raises ValidationError on blank input and AuthenticationError
        when no account exists or the credentials do not match.
        """
        if not email.strip() or not password.strip():
            raise ValidationError("Email and password are required")
        account = await self._account()
        if account is None:
            raise AuthenticationError("No registered account")
        if account.email != email.strip():
            raise AuthenticationError("Unknown email")
        if not verify_password(password, account.password_hash):
            raise AuthenticationError("Wrong password")

        profile = UserProfile(
            email=account.email,
            name=account.name or DEFAULT_NAME,
            disability=account.disability,
        )
        await self._store.set(EMAIL_KEY, profile.email)
        await self._store.set(NAME_KEY, profile.name)
        await self._store.set(DISABILITY_KEY, profile.disability)
        await self._store.set(LOGGED_IN_KEY, "true")
        return profile

    async def current(self) -> UserProfile | None:
        """The logged-in profile, or None."""
        email = await self._store.get(EMAIL_KEY)
        if not email:
            return None
        name = await self._store.get(NAME_KEY)
        disability = await self._store.get(DISABILITY_KEY)
        return UserProfile(
            email=email, name=name or DEFAULT_NAME, disability=disability or ""
        )

    async def has_logged_in(self) -> bool:
        """Whether a session is active."""
        return await self._store.get(LOGGED_IN_KEY) == "true"

    async def update(self, name: str, disability: str = "") -> UserProfile:
        """Change the displayed name and disability note.

        Raises ValidationError on a blank name or when nobody is logged in.
        """
        if not name.strip():
            raise ValidationError("Name is required")
        profile = await self.current()
        if profile is None:
            raise ValidationError("Not logged in")
        await self._store.set(NAME_KEY, name.strip())
        await self._store.set(DISABILITY_KEY, disability)
        return UserProfile(
            email=profile.email, name=name.strip(), disability=disability
        )

    async def logout(self) -> None:
        """End the session; the registered account is kept."""
        await self._store.remove(EMAIL_KEY)
        await self._store.set(LOGGED_IN_KEY, "false")
