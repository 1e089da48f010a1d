"""Authentication endpoints: register, login, refresh, profile, Google sign-in."""

import logging
import secrets
from urllib.parse import urlencode

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_current_user
from app.core.security import InvalidTokenError
from app.db.base import get_db
from app.models.user import User
from app.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    MessageResponse,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)
from app.services.accounts import delete_user_account
from app.services.google_oauth import OAuthError, get_or_create_oauth_user, google_oauth
from app.services.sessions import end_session, rotate_session, start_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

OAUTH_STATE_COOKIE = "oauth_state"


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.REFRESH_COOKIE_NAME,
        token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


# ── Register / Login ───────────────────────────────

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, response: Response, db: AsyncSession = Depends(get_db)):
    """Create a password account and sign it in."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(name=body.name, email=body.email)
    user.set_password(body.password)
    user.validate_credentials()
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    access_token, refresh_token = await start_session(db, user)
    await db.commit()

    _set_refresh_cookie(response, refresh_token)
    logger.info("User registered: user=%s", user.id)
    return AuthResponse(user=UserResponse.model_validate(user), access_token=access_token)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    """Authenticate via email + password."""
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if not user or not user.check_password(body.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    access_token, refresh_token = await start_session(db, user)
    await db.commit()

    _set_refresh_cookie(response, refresh_token)
    return AuthResponse(user=UserResponse.model_validate(user), access_token=access_token)


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(
    response: Response,
    refresh_token: str | None = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    db: AsyncSession = Depends(get_db),
):
    """Swap the refresh cookie for a new access token; the cookie is rotated."""
    if not refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No refresh token")
    try:
        _, access_token, new_refresh_token = await rotate_session(db, refresh_token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )
    await db.commit()

    _set_refresh_cookie(response, new_refresh_token)
    return AccessTokenResponse(access_token=access_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    refresh_token: str | None = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the presented refresh token and clear its cookie."""
    if await end_session(db, refresh_token):
        await db.commit()
    _clear_refresh_cookie(response)
    return MessageResponse(message="Session closed")


# ── Profile ────────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return MeResponse(user=UserResponse.model_validate(current_user))


@router.put("/update", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, country, phone and saved addresses. Other fields are ignored."""
    updates = body.model_dump(exclude_unset=True)
    if "addresses" in updates:
        updates["addresses"] = [a.model_dump() for a in body.addresses or []]
    if updates.get("country") is None:
        updates.pop("country", None)
    if updates.get("name") is None:
        updates.pop("name", None)

    for field, value in updates.items():
        setattr(current_user, field, value)

    await db.commit()
    await db.refresh(current_user)
    return ProfileResponse(user=UserResponse.model_validate(current_user))


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user.check_password(body.current_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    current_user.set_password(body.new_password)
    await db.commit()
    return MessageResponse(message="Password changed")


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete the caller's account together with every order placed under its email."""
    await delete_user_account(db, current_user)
    await db.commit()

    _clear_refresh_cookie(response)
    return MessageResponse(message="Account deleted")


# ── Google sign-in ─────────────────────────────────

def _frontend_redirect(path: str, **params: str) -> RedirectResponse:
    url = f"{settings.FRONTEND_URL}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/google")
async def google_login():
    """Send the browser to Google's consent screen."""
    state = secrets.token_urlsafe(32)
    response = RedirectResponse(
        google_oauth.authorization_url(state), status_code=status.HTTP_307_TEMPORARY_REDIRECT
    )
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=10 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth_state: str | None = Cookie(None),
    db: AsyncSession = Depends(get_db),
):
    """Finish Google sign-in and hand the access token to the frontend."""
    failure = _frontend_redirect("/login", error="google")
    failure.delete_cookie(OAUTH_STATE_COOKIE)

    if error or not code:
        logger.warning("Google sign-in aborted: %s", error or "missing code")
        return failure
    if not state or not oauth_state or not secrets.compare_digest(state, oauth_state):
        logger.warning("Google sign-in rejected: state mismatch")
        return failure

    try:
        profile = await google_oauth.fetch_profile(code)
        user = await get_or_create_oauth_user(db, profile)
    except OAuthError as exc:
        logger.warning("Google sign-in failed: %s", exc)
        return failure

    access_token, refresh_token = await start_session(db, user)
    await db.commit()

    response = _frontend_redirect("/auth-success", token=access_token)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    _set_refresh_cookie(response, refresh_token)
    return response
