from __future__ import annotations

from pydantic import BaseModel


class User(BaseModel):
    github_id: int
    github_login: str
    display_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


class Session(BaseModel):
    user: User
    access_token: str
    issued_at: float

    def public_view(self) -> dict:
        """Session data safe to hand to the browser (no token)."""
        return {"user": self.user.model_dump()}
