"""Changelog route: a repo's recent commits reshaped for the timeline."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from ratemygit.api.errors import error_detail, github_http_error
from ratemygit.auth.middleware import require_session
from ratemygit.models.github import ChangelogEntry
from ratemygit.services.github_service import GitHubError, GitHubService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["changelog"])


@router.get("/changelog", response_model=list[ChangelogEntry], response_model_by_alias=True)
async def get_changelog(request: Request, owner: str | None = None, repo: str | None = None):
    session = require_session(request)
    if not owner or not repo:
        raise HTTPException(status_code=400, detail=error_detail("Repository owner and name are required"))

    gh = GitHubService(session.access_token)
    try:
        return await asyncio.to_thread(gh.list_commits, owner, repo)
    except GitHubError as e:
        raise github_http_error(e)
    except Exception:
        logger.exception("Error fetching changelog for %s/%s", owner, repo)
        raise HTTPException(status_code=500, detail=error_detail("Internal server error"))
    finally:
        gh.close()
