"""Google OAuth 2.0 federation: consent URL, code exchange, local account mapping."""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.user import User

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_SCOPES = "openid email profile"


class OAuthError(Exception):
    """The provider refused, was unreachable, or returned an unusable profile."""


@dataclass(frozen=True)
class GoogleProfile:
    sub: str
    email: str | None
    name: str | None


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.client_secret = (
            client_secret if client_secret is not None else settings.GOOGLE_CLIENT_SECRET
        )
        self.redirect_uri = redirect_uri or f"{settings.BACKEND_URL}/api/auth/google/callback"
        self.timeout = timeout
        self.transport = transport

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange an authorization code for the signed-in Google profile."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                token_resp = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "grant_type": "authorization_code",
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                    },
                )
                token_resp.raise_for_status()
                access_token = token_resp.json()["access_token"]

                info_resp = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                info_resp.raise_for_status()
                info = info_resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Google OAuth API error: %s", exc)
            raise OAuthError("Google rejected the authorization code") from exc
        except httpx.RequestError as exc:
            logger.error("Google OAuth connection error: %s", exc)
            raise OAuthError("Cannot reach Google") from exc
        except KeyError as exc:
            raise OAuthError("Google token response had no access_token") from exc

        if not info.get("sub"):
            raise OAuthError("Google profile had no subject id")
        return GoogleProfile(sub=info["sub"], email=info.get("email"), name=info.get("name"))


async def get_or_create_oauth_user(db: AsyncSession, profile: GoogleProfile) -> User:
    """Map a Google profile to a local account, creating a password-less one if needed."""
    if not profile.email:
        raise OAuthError("Google profile has no email address")

    email = profile.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    user = User(
        name=profile.name or email.split("@", 1)[0],
        email=email,
        google_id=profile.sub,
    )
    user.validate_credentials()
    db.add(user)
    await db.flush()
    logger.info("Created account from Google sign-in: user=%s", user.id)
    return user


google_oauth = GoogleOAuthClient()
