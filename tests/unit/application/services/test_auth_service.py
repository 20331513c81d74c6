"""Tests for AuthService and password helpers."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from merch_archive.application.services.auth_service import (
    INVALID_CREDENTIALS,
    AuthService,
    hash_password,
    normalize_email,
    require_signed_in,
    verify_password,
)
from merch_archive.config import AuthSettings
from merch_archive.domain.entities import AuthSession, Identity, User
from merch_archive.domain.exceptions import (
    AuthenticationError,
    DuplicateEntityException,
    UniqueViolationError,
    ValidationException,
)


class TestPasswordHelpers:
    """Test bcrypt hashing helpers."""

    def test_hash_and_verify(self) -> None:
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    def test_malformed_hash_does_not_verify(self) -> None:
        assert verify_password("hunter22", "not-a-bcrypt-hash") is False

    def test_normalize_email(self) -> None:
        assert normalize_email("  Anna@Example.COM ") == "anna@example.com"
        assert normalize_email(None) == ""


class TestRequireSignedIn:
    """Test require_signed_in()."""

    def test_passes_identity_through(self) -> None:
        identity = Identity(user_id="u", email="u@example.com")
        assert require_signed_in(identity) is identity

    def test_anonymous_raises(self) -> None:
        with pytest.raises(AuthenticationError):
            require_signed_in(None)


@pytest.fixture
def users() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_email.return_value = None
    return repo


@pytest.fixture
def sessions() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(users, sessions) -> AuthService:
    return AuthService(users, sessions, AuthSettings(min_password_length=6))


class TestSignUp:
    """Test AuthService.sign_up()."""

    @pytest.mark.asyncio
    async def test_creates_user_with_hashed_password(self, service, users) -> None:
        user = await service.sign_up(" Anna@Example.com ", "secret1")

        assert user.email == "anna@example.com"
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)
        users.add.assert_awaited_once_with(user)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "anna", "anna@", "anna@example", "a b@example.com"])
    async def test_rejects_bad_email(self, service, email: str) -> None:
        with pytest.raises(ValidationException):
            await service.sign_up(email, "secret1")

    @pytest.mark.asyncio
    async def test_rejects_short_password(self, service) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.sign_up("anna@example.com", "12345")
        assert "6 characters" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service, users) -> None:
        users.get_by_email.return_value = User(email="anna@example.com", password_hash="x")
        with pytest.raises(DuplicateEntityException):
            await service.sign_up("anna@example.com", "secret1")
        users.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email_race(self, service, users) -> None:
        users.add.side_effect = UniqueViolationError("User", "email", "anna@example.com")
        with pytest.raises(DuplicateEntityException):
            await service.sign_up("anna@example.com", "secret1")


class TestSignIn:
    """Test AuthService.sign_in()."""

    @pytest.mark.asyncio
    async def test_opens_session(self, service, users, sessions) -> None:
        user = User(email="anna@example.com", password_hash=hash_password("secret1"))
        users.get_by_email.return_value = user

        session = await service.sign_in("ANNA@example.com", "secret1")

        assert session.user_id == user.id
        assert len(session.token) >= 32
        assert session.expires_at > datetime.now(UTC)
        sessions.add.assert_awaited_once_with(session)

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_share_message(
        self, service, users
    ) -> None:
        with pytest.raises(AuthenticationError) as unknown:
            await service.sign_in("nobody@example.com", "secret1")

        users.get_by_email.return_value = User(
            email="anna@example.com", password_hash=hash_password("secret1")
        )
        with pytest.raises(AuthenticationError) as wrong:
            await service.sign_in("anna@example.com", "nope-nope")

        assert unknown.value.message == wrong.value.message == INVALID_CREDENTIALS


class TestResolve:
    """Test AuthService.resolve() and sign_out()."""

    @pytest.mark.asyncio
    async def test_no_token_is_anonymous(self, service, sessions) -> None:
        assert await service.resolve(None) is None
        sessions.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_valid_session_resolves_identity(self, service, users, sessions) -> None:
        user = User(email="anna@example.com", password_hash="x")
        sessions.get.return_value = AuthSession(
            token="t", user_id=user.id, expires_at=datetime.now(UTC) + timedelta(hours=1)
        )
        users.get_by_id.return_value = user

        identity = await service.resolve("t")

        assert identity == Identity(user_id=user.id, email="anna@example.com")

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted(self, service, sessions) -> None:
        sessions.get.return_value = AuthSession(
            token="t", user_id="u", expires_at=datetime.now(UTC) - timedelta(seconds=1)
        )

        assert await service.resolve("t") is None
        sessions.delete.assert_awaited_once_with("t")

    @pytest.mark.asyncio
    async def test_sign_out_deletes_session(self, service, sessions) -> None:
        await service.sign_out("t")
        sessions.delete.assert_awaited_once_with("t")

    @pytest.mark.asyncio
    async def test_sign_out_without_token_is_noop(self, service, sessions) -> None:
        await service.sign_out(None)
        sessions.delete.assert_not_awaited()
