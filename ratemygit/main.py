"""RateMyGit — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ratemygit.api.errors import register_error_handlers
from ratemygit.auth.middleware import AuthMiddleware
from ratemygit.config import settings
from ratemygit.services.llm_service import configured_providers

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    providers = sorted(configured_providers())
    if not providers:
        logger.warning("No LLM API key configured; /api/roast and /api/summary will fail")
    logger.info("RateMyGit server ready (mode=%s, llm=%s)", settings.deployment_mode, ",".join(providers) or "none")
    yield
    logger.info("RateMyGit server stopped")


app = FastAPI(
    title="RateMyGit",
    description="GitHub changelogs and AI commit roasts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuthMiddleware)

register_error_handlers(app)

# Import and register routers
from ratemygit.auth.github_oauth import router as auth_router
from ratemygit.api.repositories import router as repositories_router
from ratemygit.api.changelog import router as changelog_router
from ratemygit.api.roast import router as roast_router
from ratemygit.api.summary import router as summary_router
from ratemygit.api.share import router as share_router

app.include_router(auth_router)
app.include_router(repositories_router)
app.include_router(changelog_router)
app.include_router(roast_router)
app.include_router(summary_router)
app.include_router(share_router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "ratemygit", "version": "0.1.0"}


@app.get("/")
async def root():
    return {"service": "ratemygit", "docs": "/docs"}
