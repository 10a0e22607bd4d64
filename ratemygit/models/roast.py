from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RatingLevel(str, Enum):
    G = "G"
    PG = "PG"
    R = "R"
    UNHINGED = "Unhinged"


class RoastType(str, Enum):
    COMMIT = "commit"
    PROFILE = "profile"
    REPOSITORY = "repository"


class RoastRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    commit_url: str = Field(alias="commitUrl", min_length=1)
    username: str | None = None
    rating_level: RatingLevel = Field(alias="ratingLevel")
    model: str | None = None

    @field_validator("commit_url")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("commitUrl must not be blank")
        return v

    @field_validator("username", "model")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class RoastResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tweet: str = Field(max_length=280)
    deep_roast: str = Field(alias="deepRoast")
    model: str
    duration_ms: int = Field(alias="durationMs")


class ShareRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(min_length=1)
    type: str = Field(default="main", pattern="^(main|commit)$")
    repo_name: str | None = Field(default=None, alias="repoName")
    commit_title: str | None = Field(default=None, alias="commitTitle")
