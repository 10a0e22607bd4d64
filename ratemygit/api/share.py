"""Share route: tweet text and intent URL for a roast."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from ratemygit.api.errors import error_detail, read_json_body
from ratemygit.models.roast import ShareRequest
from ratemygit.utils.share import format_roast_for_twitter, twitter_intent_url

router = APIRouter(prefix="/api/share", tags=["share"])


@router.post("/tweet")
async def share_tweet(request: Request):
    body = await read_json_body(request)
    try:
        share = ShareRequest.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=error_detail("Invalid share request", str(e)))

    text = format_roast_for_twitter(
        share.content,
        roast_type=share.type,
        repo_name=share.repo_name,
        commit_title=share.commit_title,
    )
    return {"text": text, "url": twitter_intent_url(text)}
