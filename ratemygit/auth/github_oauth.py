"""GitHub OAuth sign-in: exchanges the OAuth code for a token and sets the session cookie."""

from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Request, Response
from fastapi.responses import RedirectResponse

from ratemygit.auth.sessions import create_session
from ratemygit.config import settings
from ratemygit.models.user import User
from ratemygit.services.state_store import get_state_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_state_store = get_state_store()

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"

OAUTH_SCOPE = "read:user user:email repo"


def _callback_url() -> str:
    return f"{settings.app_base_url}/api/auth/callback/github"


def _error_redirect(code: str) -> RedirectResponse:
    return RedirectResponse(f"{settings.frontend_url}/?{urlencode({'error': code})}")


@router.get("/signin/github")
async def github_signin():
    """Redirect to GitHub OAuth authorization page."""
    state = secrets.token_urlsafe(32)
    await _state_store.put_state(state)

    params = {
        "client_id": settings.github_client_id,
        "redirect_uri": _callback_url(),
        "scope": OAUTH_SCOPE,
        "state": state,
    }
    return RedirectResponse(f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}")


@router.get("/callback/github")
async def github_callback(code: str | None = None, state: str | None = None, error: str | None = None):
    """Handle GitHub OAuth callback, including the user declining access."""
    if error or not code or not state:
        if state:
            await _state_store.validate_state(state)
        logger.info("GitHub OAuth callback without a code: %s", error or "missing parameters")
        return _error_redirect(error or "invalid_state")
    if not await _state_store.validate_state(state):
        return _error_redirect("invalid_state")

    async with httpx.AsyncClient() as client:
        try:
            token_resp = await client.post(
                GITHUB_TOKEN_URL,
                json={
                    "client_id": settings.github_client_id,
                    "client_secret": settings.github_client_secret,
                    "code": code,
                    "redirect_uri": _callback_url(),
                },
                headers={"Accept": "application/json"},
            )
            token_data = token_resp.json()
        except (httpx.RequestError, ValueError) as e:
            logger.error("GitHub token exchange failed: %s", e)
            return _error_redirect("token_failed")

        access_token = token_data.get("access_token")
        if not access_token:
            logger.warning("GitHub token exchange returned no token: %s", token_data.get("error"))
            return _error_redirect("token_failed")

        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": settings.github_user_agent,
        }
        try:
            user_resp = await client.get(GITHUB_USER_URL, headers=headers)
            user_resp.raise_for_status()
            github_user = user_resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Fetching GitHub user failed: %s", e)
            return _error_redirect("profile_failed")

    user = User(
        github_id=github_user["id"],
        github_login=github_user["login"],
        display_name=github_user.get("name"),
        email=github_user.get("email"),
        avatar_url=github_user.get("avatar_url"),
    )
    logger.info("GitHub sign-in for %s", user.github_login)

    redirect = RedirectResponse(f"{settings.frontend_url}/select-repo", status_code=302)
    redirect.set_cookie(
        key=settings.session_cookie_name,
        value=create_session(user, access_token),
        httponly=True,
        samesite="lax",
        secure=not settings.app_base_url.startswith("http://localhost"),
    )
    return redirect


@router.get("/session")
async def get_session(request: Request):
    """Get the currently signed-in user."""
    session = getattr(request.state, "session", None)
    if not session:
        return {"user": None}
    return session.public_view()


@router.post("/signout")
async def signout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(settings.session_cookie_name)
    return {"ok": True}
