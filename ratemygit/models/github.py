from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RepositorySummary(BaseModel):
    id: int
    name: str
    full_name: str
    private: bool = False
    description: str | None = None
    html_url: str
    updated_at: str | None = None


class ChangelogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    date: str
    repo_link: str = Field(alias="repoLink")
    summary: str
