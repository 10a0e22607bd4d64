"""Repository picker routes: the signed-in user's repos and single-repo lookup."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from ratemygit.api.errors import error_detail, github_http_error
from ratemygit.auth.middleware import require_session
from ratemygit.models.github import RepositorySummary
from ratemygit.services.github_service import GitHubError, GitHubService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["repositories"])


@router.get("/repositories", response_model=list[RepositorySummary])
async def list_repositories(request: Request):
    session = require_session(request)
    gh = GitHubService(session.access_token)
    try:
        return await asyncio.to_thread(gh.list_repos)
    except GitHubError as e:
        raise github_http_error(e)
    except Exception:
        logger.exception("Error fetching repositories")
        raise HTTPException(status_code=500, detail=error_detail("Internal server error"))
    finally:
        gh.close()


@router.get("/search-repo", response_model=RepositorySummary)
async def search_repository(request: Request, owner: str | None = None, repo: str | None = None):
    session = require_session(request)
    if not owner or not repo:
        raise HTTPException(status_code=400, detail=error_detail("Owner and repo parameters are required"))

    gh = GitHubService(session.access_token)
    try:
        return await asyncio.to_thread(gh.get_repo_summary, owner, repo)
    except GitHubError as e:
        raise github_http_error(e, not_found="Repository not found or not accessible")
    except Exception:
        logger.exception("Error searching repository %s/%s", owner, repo)
        raise HTTPException(status_code=500, detail=error_detail("Internal server error"))
    finally:
        gh.close()
