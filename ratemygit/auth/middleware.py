"""Session middleware: resolves the session cookie onto ``request.state.session``."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware

from ratemygit.auth.sessions import verify_session
from ratemygit.config import settings
from ratemygit.models.user import Session

logger = logging.getLogger(__name__)

# Paths that never look at the session
PUBLIC_PATHS = {
    "/api/auth/signin/github",
    "/api/auth/callback/github",
    "/health",
    "/",
}

NOT_AUTHENTICATED = "Not authenticated or missing access token"


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.session = None

        path = request.url.path
        if path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/openapi"):
            return await call_next(request)

        cookie = request.cookies.get(settings.session_cookie_name)
        if cookie:
            request.state.session = verify_session(cookie)

        return await call_next(request)


def require_session(request: Request) -> Session:
    """Return the caller's session or raise 401."""
    session: Session | None = getattr(request.state, "session", None)
    if session is None or not session.access_token:
        raise HTTPException(status_code=401, detail={"error": NOT_AUTHENTICATED})
    return session
