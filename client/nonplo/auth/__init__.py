"""Auth session helpers."""

from nonplo.auth.session import (  # noqa: F401
    AuthProvider,
    AuthSession,
    CallbackAuthProvider,
    StaticAuthProvider,
    auth_redirect_url,
    session_from_token,
)
