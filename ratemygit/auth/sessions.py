"""Stateless sessions: the session is an encrypted cookie, nothing is stored server-side."""

from __future__ import annotations

import json
import logging
import time

from pydantic import ValidationError

from ratemygit.config import settings
from ratemygit.models.user import Session, User
from ratemygit.utils.crypto import DecryptionError, decrypt, encrypt

logger = logging.getLogger(__name__)


def create_session(user: User, access_token: str) -> str:
    """Build a session for the user and return the encrypted cookie value."""
    session = Session(user=user, access_token=access_token, issued_at=time.time())
    return encrypt(session.model_dump_json())


def verify_session(cookie_value: str) -> Session | None:
    """Decrypt a session cookie, or return None if it is invalid or expired."""
    try:
        raw = decrypt(cookie_value, ttl=settings.session_max_age_seconds)
    except DecryptionError:
        logger.info("Rejected invalid or expired session cookie")
        return None
    try:
        return Session.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError):
        logger.warning("Session cookie decrypted but payload is malformed")
        return None
