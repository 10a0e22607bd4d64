"""Roast orchestration: classify a GitHub URL, gather context, prompt the LLM, cache the result."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from urllib.parse import urlparse

from ratemygit.config import settings
from ratemygit.models.roast import RoastRequest, RoastResponse, RoastType
from ratemygit.services.cache_service import roast_cache, roast_cache_key
from ratemygit.services.github_service import GitHubError, GitHubService
from ratemygit.services.llm_service import LLMError, complete_with_fallback
from ratemygit.services.prompts import build_commit_history_roast_prompt, build_roast_prompt

logger = logging.getLogger(__name__)

TWEET_MAX_CHARS = 280
GITHUB_HOSTS = {"github.com", "www.github.com"}

_LABEL_RE = re.compile(r"^\s*(?:line\s*[12]\s*[:.)-]|tweet\s*:|deep\s*roast\s*:)\s*", re.IGNORECASE)


class InvalidRoastUrlError(ValueError):
    """The URL is not a GitHub commit, profile, or repository URL."""


@dataclass(frozen=True)
class RoastTarget:
    type: RoastType
    owner: str
    repo: str | None = None
    sha: str | None = None

    @property
    def resource_id(self) -> str:
        if self.type is RoastType.COMMIT:
            return f"{self.owner}/{self.repo}@{self.sha}"
        if self.type is RoastType.REPOSITORY:
            return f"{self.owner}/{self.repo}"
        return self.owner


def determine_roast_type(url: str) -> RoastTarget:
    """Classify a GitHub URL by its path segments.

    1 segment is a profile, 2 a repository, and 4+ with ``commit`` at
    index 2 a commit. Anything else raises InvalidRoastUrlError.
    """
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    parsed = urlparse(candidate)
    if parsed.hostname not in GITHUB_HOSTS:
        raise InvalidRoastUrlError(f"Not a GitHub URL: {url}")

    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) == 1:
        return RoastTarget(RoastType.PROFILE, owner=segments[0])
    if len(segments) == 2:
        repo = segments[1][:-4] if segments[1].endswith(".git") else segments[1]
        return RoastTarget(RoastType.REPOSITORY, owner=segments[0], repo=repo)
    if len(segments) >= 4 and segments[2] == "commit":
        return RoastTarget(RoastType.COMMIT, owner=segments[0], repo=segments[1], sha=segments[3])
    raise InvalidRoastUrlError(f"Could not determine roast type for URL: {url}")


def truncate_patch(patch: str, max_chars: int | None = None, keep_lines: int | None = None) -> str:
    """Keep the head and tail of an oversized patch with a marker in between."""
    max_chars = settings.patch_max_chars if max_chars is None else max_chars
    keep_lines = settings.patch_keep_lines if keep_lines is None else keep_lines
    if len(patch) <= max_chars:
        return patch

    lines = patch.split("\n")
    if len(lines) <= keep_lines * 2:
        # Few but very long lines: cut by characters instead
        half = max_chars // 2
        dropped = len(patch) - half * 2
        return f"{patch[:half]}\n... [{dropped} characters truncated] ...\n{patch[-half:]}"
    dropped = len(lines) - keep_lines * 2
    marker = f"... [{dropped} lines truncated] ..."
    return "\n".join(lines[:keep_lines] + [marker] + lines[-keep_lines:])


def _strip_label(line: str) -> str:
    return _LABEL_RE.sub("", line).strip()


def parse_roast_output(text: str) -> tuple[str, str]:
    """Split raw LLM output into (tweet, deep_roast)."""
    lines = [_strip_label(line) for line in text.split("\n")]
    lines = [line for line in lines if line]
    if not lines:
        raise LLMError("LLM returned an empty roast")

    first = lines[0]
    deep_roast = " ".join(lines[1:]) or first
    tweet = first
    if len(tweet) > TWEET_MAX_CHARS:
        tweet = tweet[: TWEET_MAX_CHARS - 3] + "..."
    return tweet, deep_roast


async def _gather_all(*aws):
    """Like ``asyncio.gather`` but lets every call finish before raising the first error."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def _optional_profile(gh: GitHubService, login: str) -> dict | None:
    try:
        return gh.get_user_profile(login)
    except GitHubError as e:
        logger.warning("No profile for commit author %s: %s", login, e.details or e.message)
        return None


async def _gather_context(target: RoastTarget, username: str | None) -> dict:
    """Fetch the GitHub data the roast template needs, concurrently where independent."""
    gh = GitHubService.public()
    try:
        if target.type is RoastType.COMMIT:
            patch, author = await _gather_all(
                gh.fetch_commit_patch(target.owner, target.repo, target.sha),
                asyncio.to_thread(_optional_profile, gh, username or target.owner),
            )
            return {
                "owner": target.owner,
                "repo": target.repo,
                "sha": target.sha,
                "author": author,
                "patch": truncate_patch(patch),
            }
        if target.type is RoastType.PROFILE:
            profile, repos = await _gather_all(
                asyncio.to_thread(gh.get_user_profile, target.owner),
                asyncio.to_thread(gh.list_user_repos, target.owner),
            )
            return {"profile": profile, "repos": repos}
        repo, commits = await _gather_all(
            asyncio.to_thread(gh.get_repo_details, target.owner, target.repo),
            asyncio.to_thread(gh.recent_commit_messages, target.owner, target.repo),
        )
        return {"repo": repo, "commits": commits}
    finally:
        gh.close()


async def generate_roast(request: RoastRequest) -> dict:
    """Produce a roast payload for the request, serving from cache when possible.

    Raises:
        InvalidRoastUrlError: If the URL can't be classified.
        GitHubError: If a GitHub lookup fails.
        LLMError: If every LLM provider fails.
    """
    start = time.time()
    target = determine_roast_type(request.commit_url)
    rating = request.rating_level.value
    key = roast_cache_key(target.type.value, target.resource_id, rating, request.model)

    cached = roast_cache.get(key)
    if cached is not None:
        logger.info("Roast cache hit for %s", key)
        return cached

    context = await _gather_context(target, request.username)
    prompt = build_roast_prompt(target.type, request.rating_level, context)
    text, model_used = await complete_with_fallback(
        prompt, model=request.model, max_tokens=600, temperature=1.0
    )
    tweet, deep_roast = parse_roast_output(text)

    result = RoastResponse(
        tweet=tweet,
        deep_roast=deep_roast,
        model=model_used,
        duration_ms=int((time.time() - start) * 1000),
    ).model_dump(by_alias=True)

    roast_cache.put(key, result)
    logger.info("Generated %s roast for %s with %s", target.type.value, target.resource_id, model_used)
    return result


async def roast_commit_history(commit_history: str) -> str:
    """One- or two-sentence roast of raw commit text, as used by the changelog view."""
    prompt = build_commit_history_roast_prompt(commit_history)
    text, model_used = await complete_with_fallback(prompt, max_tokens=150, temperature=1.0)
    roast = text.strip()
    if not roast:
        raise LLMError("LLM returned an empty roast")
    logger.info("Generated commit-history roast with %s", model_used)
    return roast
