"""Exception handlers that render every error as ``{"error": ..., "details"?: ...}``."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ratemygit.models.common import ErrorResponse
from ratemygit.services.github_service import GitHubError

logger = logging.getLogger(__name__)


def error_detail(message: str, details: str | None = None) -> dict:
    return ErrorResponse(error=message, details=details or None).model_dump(exclude_none=True)


def github_http_error(e: GitHubError, not_found: str | None = None) -> HTTPException:
    """Map a GitHubError onto the HTTP status GitHub returned."""
    if e.status_code == 404 and not_found:
        return HTTPException(status_code=404, detail=error_detail(not_found))
    return HTTPException(status_code=e.status_code, detail=error_detail(e.message, e.details))


async def read_json_body(request: Request) -> dict:
    """Parse the request body as a JSON object or raise 400."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail=error_detail("Request body must be JSON"))
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail=error_detail("Request body must be a JSON object"))
    return body


def register_error_handlers(app: FastAPI) -> None:
    """Attach the JSON error envelope to the FastAPI application."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            content = exc.detail
        else:
            content = {"error": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", []) if p != "query")
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return JSONResponse(status_code=400, content={"error": "; ".join(messages)})
