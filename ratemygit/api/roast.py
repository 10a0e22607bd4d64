"""Roast route: AI roast of a GitHub commit, profile, or repository.

A body carrying ``commitHistory`` instead of ``commitUrl`` gets the short
changelog-view roast, ``{"roast": ...}``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from ratemygit.api.errors import error_detail, github_http_error, read_json_body
from ratemygit.models.roast import RatingLevel, RoastRequest
from ratemygit.services.github_service import GitHubError
from ratemygit.services.llm_service import LLMError, LLMNotConfiguredError
from ratemygit.services.roast_service import InvalidRoastUrlError, generate_roast, roast_commit_history

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["roast"])

VALID_RATINGS = [r.value for r in RatingLevel]


@router.post("/roast")
async def roast(request: Request):
    body = await read_json_body(request)

    commit_history = body.get("commitHistory")
    if not body.get("commitUrl") and commit_history and isinstance(commit_history, str):
        return await _roast_history(commit_history)

    if not body.get("commitUrl"):
        raise HTTPException(status_code=400, detail=error_detail("commitUrl is required"))
    if body.get("ratingLevel") not in VALID_RATINGS:
        raise HTTPException(
            status_code=400,
            detail=error_detail(f"Invalid rating level. Must be one of: {', '.join(VALID_RATINGS)}"),
        )
    try:
        roast_request = RoastRequest.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=error_detail("Invalid roast request", str(e)))

    try:
        return await generate_roast(roast_request)
    except InvalidRoastUrlError as e:
        raise HTTPException(status_code=400, detail=error_detail(str(e)))
    except GitHubError as e:
        raise github_http_error(e, not_found="GitHub resource not found")
    except LLMNotConfiguredError:
        raise HTTPException(status_code=500, detail=error_detail("No AI API key configured"))
    except LLMError as e:
        raise HTTPException(status_code=500, detail=error_detail(f"Failed to generate roast: {e}"))
    except Exception:
        logger.exception("Error generating roast")
        raise HTTPException(status_code=500, detail=error_detail("Failed to generate roast"))


async def _roast_history(commit_history: str) -> dict:
    try:
        return {"roast": await roast_commit_history(commit_history)}
    except LLMNotConfiguredError:
        raise HTTPException(status_code=500, detail=error_detail("No AI API key configured"))
    except LLMError as e:
        logger.error("Commit-history roast failed: %s", e)
        raise HTTPException(status_code=500, detail=error_detail("Failed to generate roast"))
    except Exception:
        logger.exception("Error generating commit-history roast")
        raise HTTPException(status_code=500, detail=error_detail("Failed to generate roast"))
