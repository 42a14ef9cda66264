"""Authenticated user session derived from the access token.

Token claims read:
  - sub:    user ID
  - email:  user email (optional)
  - exp:    expiry timestamp

The client normally does not hold the signing secret, so claims are read
unverified. When ``SUPABASE_JWT_SECRET`` is configured the signature and
expiry are verified as well.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Protocol
from urllib.parse import quote

from jose import JWTError, jwt

from nonplo.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str
    email: str | None = None
    expires_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    @property
    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


def decode_token(token: str) -> dict:
    """Decode a JWT. Returns empty dict on failure."""
    try:
        if settings.supabase_jwt_secret:
            return jwt.decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=[settings.supabase_jwt_algorithm],
                options={"verify_aud": False},
            )
        return jwt.get_unverified_claims(token)
    except JWTError:
        return {}


def session_from_token(token: str | None) -> Optional[AuthSession]:
    """Build an AuthSession, or None when the token is missing, invalid or expired."""
    if not token:
        return None

    claims = decode_token(token)
    user_id = claims.get("sub")
    if not user_id:
        logger.warning("Access token has no subject claim")
        return None

    expires_at = None
    exp = claims.get("exp")
    if exp is not None:
        expires_at = datetime.fromtimestamp(int(exp), tz=timezone.utc)

    session = AuthSession(
        access_token=token,
        user_id=str(user_id),
        email=claims.get("email"),
        expires_at=expires_at,
    )
    if session.is_expired:
        logger.info(f"Access token for user {session.user_id} has expired")
        return None
    return session


class AuthProvider(Protocol):
    """Source of the current auth session (e.g. a Supabase client wrapper)."""

    async def get_session(self) -> Optional[AuthSession]: ...


class StaticAuthProvider:
    """Auth provider for callers that already hold an access token."""

    def __init__(self, access_token: str | None = None):
        self._token = access_token

    def set_token(self, access_token: str | None) -> None:
        self._token = access_token

    async def get_session(self) -> Optional[AuthSession]:
        return session_from_token(self._token)


class CallbackAuthProvider:
    """Auth provider backed by an async token getter."""

    def __init__(self, get_token: Callable[[], Awaitable[str | None]]):
        self._get_token = get_token

    async def get_session(self) -> Optional[AuthSession]:
        return session_from_token(await self._get_token())


def auth_redirect_url(next_path: str | None = None) -> str:
    """Auth page URL with a return path, e.g. ``/auth?next=%2F%3FopenNewWizard%3D1``."""
    next_path = next_path or settings.wizard_entry_path
    return f"{settings.auth_path}?next={quote(next_path, safe='')}"
