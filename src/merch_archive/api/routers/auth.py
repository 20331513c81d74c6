"""Authentication endpoints: sign up, sign in, sign out, who am I.

Hey future me - sessions are opaque random tokens stored server-side (auth_sessions table).
Login hands the token back twice: in the JSON body (for API clients using
"Authorization: Bearer ...") and as an httponly cookie (for browsers). Either works, see
get_session_token() in dependencies.
"""

import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import (
    get_app_settings,
    get_auth_service,
    get_current_identity,
    get_session_token,
)
from merch_archive.application.services import AuthService
from merch_archive.application.services.auth_service import (
    normalize_email,
    require_signed_in,
)
from merch_archive.config import Settings
from merch_archive.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class CredentialsRequest(BaseModel):
    """Email + password, used for both sign up and sign in."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Plain-text password")


class UserResponse(BaseModel):
    """The signed-in (or just created) account."""

    user_id: str = Field(..., description="User UUID")
    email: str = Field(..., description="Normalized email address")


class LoginResponse(BaseModel):
    """Session handed out by a successful sign in."""

    user_id: str
    email: str
    token: str = Field(..., description="Opaque session token")
    expires_at: str = Field(..., description="ISO 8601 expiry timestamp")


@router.post("/signup", response_model=UserResponse, status_code=201)
async def sign_up(
    body: CredentialsRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create an account. Does not sign in; call /auth/login next."""
    user = await auth_service.sign_up(body.email, body.password)
    return UserResponse(user_id=user.id, email=user.email)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: CredentialsRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    """Sign in and set the session cookie."""
    session = await auth_service.sign_in(body.email, body.password)
    response.set_cookie(
        key=settings.auth.cookie_name,
        value=session.token,
        max_age=settings.auth.session_max_age,
        httponly=True,
        secure=settings.auth.cookie_secure,
        samesite="lax",
    )
    return LoginResponse(
        user_id=session.user_id,
        email=normalize_email(body.email),
        token=session.token,
        expires_at=session.expires_at.isoformat(),
    )


@router.post("/logout", status_code=204)
async def logout(
    token: str | None = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Sign out. Works (and is a no-op) without a session too."""
    await auth_service.sign_out(token)
    response = Response(status_code=204)
    response.delete_cookie(settings.auth.cookie_name)
    return response


@router.get("/me", response_model=UserResponse)
async def me(identity: Identity | None = Depends(get_current_identity)) -> UserResponse:
    """Who is calling. 401 when anonymous."""
    identity = require_signed_in(identity)
    return UserResponse(user_id=identity.user_id, email=identity.email)
