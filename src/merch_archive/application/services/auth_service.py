"""Email/password accounts and server-side sessions."""

import asyncio
import logging
import re
import secrets
from datetime import UTC, datetime, timedelta

import bcrypt

from merch_archive.config import AuthSettings
from merch_archive.domain.entities import AuthSession, Identity, User
from merch_archive.domain.exceptions import (
    AuthenticationError,
    DuplicateEntityException,
    UniqueViolationError,
    ValidationException,
)
from merch_archive.domain.ports import (
    IAuthSessionRepository,
    IIdentityProvider,
    IUserRepository,
)

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

INVALID_CREDENTIALS = "Invalid login credentials"
SIGN_IN_REQUIRED = "Please sign in first."


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the DB - treat as a failed login, not a 500
        logger.warning("Stored password hash is malformed")
        return False


def normalize_email(email: str | None) -> str:
    """Trim and lowercase an email address."""
    return (email or "").strip().lower()


# Hey future me, this service is the ONLY place that turns a session token into an Identity.
# Everything downstream receives that Identity explicitly as an argument - no request-global
# "current user". Tokens are random opaque strings stored server-side; signing out deletes the
# row so a stolen cookie dies with it.
class AuthService(IIdentityProvider):
    """Sign up, sign in, sign out and token resolution."""

    def __init__(
        self,
        users: IUserRepository,
        sessions: IAuthSessionRepository,
        settings: AuthSettings,
    ) -> None:
        """Initialize auth service.

        Args:
            users: Account repository
            sessions: Login session repository
            settings: Auth settings (password length, session lifetime)
        """
        self._users = users
        self._sessions = sessions
        self._settings = settings

    async def sign_up(self, email: str, password: str) -> User:
        """Create a new account.

        Args:
            email: Email address (normalized here)
            password: Plain-text password

        Returns:
            The created user

        Raises:
            ValidationException: Malformed email or too-short password
            DuplicateEntityException: Email already registered
        """
        email = normalize_email(email)
        if not _EMAIL_RE.match(email):
            raise ValidationException("Please enter a valid email address.")
        if len(password or "") < self._settings.min_password_length:
            raise ValidationException(
                f"Password should be at least {self._settings.min_password_length} characters."
            )

        if await self._users.get_by_email(email) is not None:
            raise DuplicateEntityException("User", email, "User already registered")

        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(email=email, password_hash=password_hash)
        try:
            await self._users.add(user)
        except UniqueViolationError as e:
            raise DuplicateEntityException("User", email, "User already registered") from e

        logger.info("User signed up", extra={"user_id": user.id})
        return user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Check credentials and open a session.

        Raises:
            AuthenticationError: Unknown email or wrong password (same message for both)
        """
        user = await self._users.get_by_email(normalize_email(email))
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await asyncio.to_thread(verify_password, password or "", user.password_hash):
            logger.info("Failed sign-in", extra={"user_id": user.id})
            raise AuthenticationError(INVALID_CREDENTIALS)

        now = datetime.now(UTC)
        session = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            expires_at=now + timedelta(seconds=self._settings.session_max_age),
            created_at=now,
        )
        await self._sessions.add(session)
        logger.info("User signed in", extra={"user_id": user.id})
        return session

    async def sign_out(self, token: str | None) -> None:
        """End a session. Unknown or missing tokens are ignored."""
        if token:
            await self._sessions.delete(token)

    async def resolve(self, token: str | None) -> Identity | None:
        """Return the identity behind token, or None when anonymous/expired."""
        if not token:
            return None

        session = await self._sessions.get(token)
        if session is None:
            return None
        if session.is_expired():
            await self._sessions.delete(token)
            return None

        user = await self._users.get_by_id(session.user_id)
        if user is None:
            return None
        return Identity(user_id=user.id, email=user.email)


def require_signed_in(actor: Identity | None) -> Identity:
    """Return actor, or raise AuthenticationError for anonymous callers."""
    if actor is None:
        raise AuthenticationError(SIGN_IN_REQUIRED)
    return actor
