"""Tests for roast orchestration: URL classification, patch truncation, output parsing, caching."""

from __future__ import annotations

import threading
import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ratemygit.models.roast import RatingLevel, RoastRequest, RoastType
from ratemygit.services import cache_service
from ratemygit.services.github_service import GitHubError
from ratemygit.services.llm_service import LLMError
from ratemygit.services.roast_service import (
    InvalidRoastUrlError,
    determine_roast_type,
    generate_roast,
    parse_roast_output,
    roast_commit_history,
    truncate_patch,
)


# ---------------------------------------------------------------------------
# determine_roast_type
# ---------------------------------------------------------------------------

class TestDetermineRoastType:
    def test_commit_url(self):
        target = determine_roast_type("https://github.com/octo/hello/commit/abc123")
        assert target.type is RoastType.COMMIT
        assert (target.owner, target.repo, target.sha) == ("octo", "hello", "abc123")
        assert target.resource_id == "octo/hello@abc123"

    def test_commit_url_with_extra_segments(self):
        target = determine_roast_type("https://github.com/octo/hello/commit/abc123/files")
        assert target.type is RoastType.COMMIT
        assert target.sha == "abc123"

    def test_repository_url(self):
        target = determine_roast_type("https://github.com/octo/hello")
        assert target.type is RoastType.REPOSITORY
        assert target.resource_id == "octo/hello"

    def test_repository_url_strips_git_suffix(self):
        target = determine_roast_type("https://github.com/octo/hello.git")
        assert target.repo == "hello"

    def test_profile_url(self):
        target = determine_roast_type("https://github.com/octo/")
        assert target.type is RoastType.PROFILE
        assert target.resource_id == "octo"

    def test_scheme_less_url(self):
        assert determine_roast_type("github.com/octo").type is RoastType.PROFILE

    @pytest.mark.parametrize("url", [
        "https://github.com/",
        "https://github.com/octo/hello/tree",
        "https://github.com/octo/hello/tree/main",
        "https://github.com/octo/hello/pull/12",
        "https://gitlab.com/octo/hello",
        "not a url",
    ])
    def test_other_shapes_fail(self, url):
        with pytest.raises(InvalidRoastUrlError):
            determine_roast_type(url)


# ---------------------------------------------------------------------------
# truncate_patch
# ---------------------------------------------------------------------------

class TestTruncatePatch:
    def test_short_patch_unchanged(self):
        patch_text = "line\n" * 100
        assert truncate_patch(patch_text) == patch_text

    def test_exactly_at_limit_unchanged(self):
        patch_text = "x" * 8000
        assert truncate_patch(patch_text) == patch_text

    def test_long_patch_keeps_head_and_tail(self):
        lines = [f"+ line {i:04d} " + "y" * 30 for i in range(500)]
        patch_text = "\n".join(lines)
        assert len(patch_text) > 8000

        result = truncate_patch(patch_text).split("\n")
        assert len(result) == 201
        assert result[:100] == lines[:100]
        assert result[101:] == lines[-100:]
        assert result[100] == "... [300 lines truncated] ..."

    def test_few_long_lines_cut_by_characters(self):
        patch_text = "a" * 5000 + "\n" + "b" * 5000
        result = truncate_patch(patch_text)
        assert len(result) < len(patch_text)
        assert result.startswith("a" * 4000)
        assert result.endswith("b" * 4000)
        assert "characters truncated" in result


# ---------------------------------------------------------------------------
# parse_roast_output
# ---------------------------------------------------------------------------

class TestParseRoastOutput:
    def test_two_lines(self):
        tweet, deep = parse_roast_output("Short burn.\nA much longer burn about your code.")
        assert tweet == "Short burn."
        assert deep == "A much longer burn about your code."

    def test_skips_blank_lines_and_joins_remainder(self):
        tweet, deep = parse_roast_output("\n\n  First.  \n\nSecond.\nThird.\n")
        assert tweet == "First."
        assert deep == "Second. Third."

    def test_strips_labels(self):
        tweet, deep = parse_roast_output("Tweet: nice commit\nDeep roast: not really")
        assert tweet == "nice commit"
        assert deep == "not really"

    def test_long_tweet_truncated_with_ellipsis(self):
        tweet, deep = parse_roast_output("z" * 400)
        assert len(tweet) == 280
        assert tweet.endswith("...")
        assert deep == "z" * 400

    def test_empty_output_raises(self):
        with pytest.raises(LLMError):
            parse_roast_output("  \n \n")


# ---------------------------------------------------------------------------
# generate_roast
# ---------------------------------------------------------------------------

def _mock_github():
    gh = MagicMock()
    gh.fetch_commit_patch = AsyncMock(return_value="diff --git a/x b/x\n+print('hi')\n")
    gh.get_user_profile.return_value = {"login": "octo", "name": "Octo", "bio": "I ship on Fridays"}
    gh.list_user_repos.return_value = []
    gh.get_repo_details.return_value = {
        "full_name": "octo/hello",
        "description": None,
        "language": "Python",
        "stargazers_count": 1,
        "forks_count": 0,
        "open_issues_count": 0,
        "created_at": "2020-01-01T00:00:00Z",
        "pushed_at": "2024-01-01T00:00:00Z",
    }
    gh.recent_commit_messages.return_value = ["wip", "fix typo"]
    return gh


def _request(url: str = "https://github.com/octo/hello/commit/abc123", rating: str = "PG", model=None):
    return RoastRequest.model_validate({"commitUrl": url, "ratingLevel": rating, "model": model})


class TestGenerateRoast:
    @pytest.mark.asyncio
    async def test_commit_roast_fetches_patch_and_profile(self):
        gh = _mock_github()
        llm = AsyncMock(return_value=("Tweet line\nDeep line", "claude-test"))

        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            result = await generate_roast(_request())

        assert result["tweet"] == "Tweet line"
        assert result["deepRoast"] == "Deep line"
        assert result["model"] == "claude-test"
        assert isinstance(result["durationMs"], int)
        gh.fetch_commit_patch.assert_awaited_once_with("octo", "hello", "abc123")
        gh.get_user_profile.assert_called_once_with("octo")
        prompt = llm.call_args[0][0]
        assert "+print('hi')" in prompt
        assert "I ship on Fridays" in prompt
        gh.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_commit_roast_uses_username_for_profile(self):
        gh = _mock_github()
        llm = AsyncMock(return_value=("a\nb", "m"))
        request = RoastRequest.model_validate({
            "commitUrl": "https://github.com/octo/hello/commit/abc123",
            "ratingLevel": "G",
            "username": "someone-else",
        })
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            await generate_roast(request)
        gh.get_user_profile.assert_called_once_with("someone-else")

    @pytest.mark.asyncio
    async def test_repository_roast_includes_commit_messages(self):
        gh = _mock_github()
        llm = AsyncMock(return_value=("a\nb", "m"))
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            await generate_roast(_request("https://github.com/octo/hello"))

        prompt = llm.call_args[0][0]
        assert "octo/hello" in prompt
        assert "- fix typo" in prompt
        gh.fetch_commit_patch.assert_not_called()

    @pytest.mark.asyncio
    async def test_cached_within_ttl(self):
        gh = _mock_github()
        llm = AsyncMock(return_value=("a\nb", "m"))
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            first = await generate_roast(_request())
            second = await generate_roast(_request())

        assert first == second
        assert llm.await_count == 1
        assert gh.fetch_commit_patch.await_count == 1

    @pytest.mark.asyncio
    async def test_cache_key_includes_rating_and_model(self):
        gh = _mock_github()
        llm = AsyncMock(return_value=("a\nb", "m"))
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            await generate_roast(_request(rating="PG"))
            await generate_roast(_request(rating="R"))
            await generate_roast(_request(rating="R", model="gpt-4o"))
        assert llm.await_count == 3

    @pytest.mark.asyncio
    async def test_refetches_after_ttl(self):
        gh = _mock_github()
        llm = AsyncMock(return_value=("a\nb", "m"))
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            await generate_roast(_request())
            later = time.time() + 15 * 60 + 1
            with patch("ratemygit.services.cache_service.time.time", return_value=later):
                await generate_roast(_request())
        assert llm.await_count == 2

    @pytest.mark.asyncio
    async def test_llm_failure_is_not_cached(self):
        gh = _mock_github()
        llm = AsyncMock(side_effect=LLMError("boom"))
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            with pytest.raises(LLMError):
                await generate_roast(_request())
        assert cache_service.roast_cache.size == 0

    @pytest.mark.asyncio
    async def test_unknown_author_still_roasts_commit(self):
        gh = _mock_github()
        gh.get_user_profile.side_effect = GitHubError("Failed to fetch user from GitHub", 404, "Not Found")
        llm = AsyncMock(return_value=("a\nb", "m"))
        request = RoastRequest.model_validate({
            "commitUrl": "https://github.com/octo/hello/commit/abc123",
            "ratingLevel": "G",
            "username": "typo-user",
        })
        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            result = await generate_roast(request)

        assert result["tweet"] == "a"
        prompt = llm.call_args[0][0]
        assert "The author is" not in prompt
        assert "+print('hi')" in prompt

    @pytest.mark.asyncio
    async def test_patch_failure_waits_for_profile_before_close(self):
        gh = _mock_github()
        gh.fetch_commit_patch = AsyncMock(side_effect=GitHubError("Failed to fetch commit patch from GitHub", 404))
        profile_done = threading.Event()

        def slow_profile(login):
            time.sleep(0.05)
            profile_done.set()
            return {"login": login, "name": None, "bio": None}

        closed_after = []
        gh.get_user_profile.side_effect = slow_profile
        gh.close.side_effect = lambda: closed_after.append(profile_done.is_set())

        with patch("ratemygit.services.roast_service.GitHubService.public", return_value=gh), \
             patch("ratemygit.services.roast_service.complete_with_fallback", AsyncMock()) as llm:
            with pytest.raises(GitHubError):
                await generate_roast(_request())

        assert closed_after == [True]
        llm.assert_not_awaited()


# ---------------------------------------------------------------------------
# roast_commit_history
# ---------------------------------------------------------------------------

class TestRoastCommitHistory:
    @pytest.mark.asyncio
    async def test_short_roast_settings(self):
        llm = AsyncMock(return_value=("  Bold of you to call that a fix.  ", "claude-test"))
        with patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            roast = await roast_commit_history("January 5, 2024 fix typo")

        assert roast == "Bold of you to call that a fix."
        prompt = llm.call_args[0][0]
        assert "Commit:\nJanuary 5, 2024 fix typo" in prompt
        assert prompt.endswith("Roast (1-2 sentences max):")
        assert llm.call_args.kwargs["max_tokens"] == 150
        assert llm.call_args.kwargs["temperature"] == 1.0

    @pytest.mark.asyncio
    async def test_blank_output_raises(self):
        with patch("ratemygit.services.roast_service.complete_with_fallback", AsyncMock(return_value=("\n ", "m"))):
            with pytest.raises(LLMError):
                await roast_commit_history("abc fix")

    @pytest.mark.asyncio
    async def test_not_cached(self):
        llm = AsyncMock(return_value=("ouch", "m"))
        with patch("ratemygit.services.roast_service.complete_with_fallback", llm):
            await roast_commit_history("abc fix")
            await roast_commit_history("abc fix")
        assert llm.await_count == 2
        assert cache_service.roast_cache.size == 0
