"""Summary route: turns raw commit history into a short emoji changelog."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from ratemygit.api.errors import error_detail, read_json_body
from ratemygit.services.llm_service import LLMError, LLMNotConfiguredError, complete_with_fallback
from ratemygit.services.prompts import build_summary_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["summary"])


@router.post("/summary")
async def summarize(request: Request):
    body = await read_json_body(request)
    commit_history = body.get("commitHistory")
    if not commit_history or not isinstance(commit_history, str):
        raise HTTPException(status_code=400, detail=error_detail("Invalid commit history provided"))

    try:
        prompt = build_summary_prompt(commit_history)
        summary, _ = await complete_with_fallback(prompt, max_tokens=500, temperature=0.8)
    except LLMNotConfiguredError:
        raise HTTPException(status_code=500, detail=error_detail("No AI API key configured"))
    except LLMError as e:
        logger.error("Summary generation failed: %s", e)
        raise HTTPException(status_code=500, detail=error_detail("Failed to generate summary", str(e)))
    except Exception:
        logger.exception("Error generating summary")
        raise HTTPException(status_code=500, detail=error_detail("Failed to generate summary"))

    return {"summary": summary}
