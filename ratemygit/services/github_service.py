"""GitHub API wrapper: PyGithub for REST reads, httpx for raw commit patches."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

import httpx
from github import Auth, Github, GithubException

from ratemygit.config import settings

logger = logging.getLogger(__name__)

GITHUB_WEB_URL = "https://github.com"


class GitHubError(Exception):
    """A GitHub call failed. ``status_code`` is GitHub's HTTP status (500 if unknown)."""

    def __init__(self, message: str, status_code: int = 500, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


@contextmanager
def _github_call(what: str):
    """Translate PyGithub failures into GitHubError with the upstream message."""
    try:
        yield
    except GithubException as e:
        data = e.data if isinstance(e.data, dict) else {}
        details = str(data.get("message") or "Unknown error")
        logger.warning("GitHub %s failed: %s %s", what, e.status, details)
        raise GitHubError(f"Failed to fetch {what} from GitHub", e.status or 500, details) from e


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_commit_date(value: datetime) -> str:
    """Format a commit date as e.g. 'January 5, 2024'."""
    return f"{value:%B} {value.day}, {value.year}"


class GitHubService:
    """Read-only GitHub access, scoped to the signed-in user's token or anonymous."""

    def __init__(self, access_token: str | None = None):
        self.access_token = access_token
        kwargs = {"user_agent": settings.github_user_agent, "per_page": 100}
        if access_token:
            kwargs["auth"] = Auth.Token(access_token)
        self.gh = Github(**kwargs)

    @classmethod
    def public(cls) -> "GitHubService":
        """Service for public lookups, using the server token when one is configured."""
        return cls(settings.github_token or None)

    def close(self):
        self.gh.close()

    # ── Signed-in user ──

    def list_repos(self, limit: int | None = None) -> list[dict]:
        """List repos accessible to the authenticated user, most recently updated first."""
        limit = limit or settings.repository_limit
        repos = []
        with _github_call("repositories"):
            for i, repo in enumerate(self.gh.get_user().get_repos(sort="updated")):
                if i >= limit:
                    break
                repos.append(self._repo_summary(repo))
        return repos

    def get_repo_summary(self, owner: str, name: str) -> dict:
        with _github_call("repository"):
            repo = self.gh.get_repo(f"{owner}/{name}")
            return self._repo_summary(repo)

    def list_commits(self, owner: str, name: str, limit: int | None = None) -> list[dict]:
        """Recent commits of a repo as changelog entries."""
        limit = limit or settings.changelog_limit
        entries = []
        with _github_call("commits"):
            repo = self.gh.get_repo(f"{owner}/{name}")
            for i, commit in enumerate(repo.get_commits()):
                if i >= limit:
                    break
                message = commit.commit.message or ""
                author = commit.commit.author
                entries.append({
                    "title": message.split("\n", 1)[0],
                    "date": format_commit_date(author.date) if author and author.date else "",
                    "repoLink": commit.html_url,
                    "summary": message,
                })
        return entries

    @staticmethod
    def _repo_summary(repo) -> dict:
        return {
            "id": repo.id,
            "name": repo.name,
            "full_name": repo.full_name,
            "private": repo.private,
            "description": repo.description,
            "html_url": repo.html_url,
            "updated_at": _iso(repo.updated_at),
        }

    # ── Public lookups (roasts) ──

    def get_user_profile(self, login: str) -> dict:
        with _github_call("user profile"):
            raw = self.gh.get_user(login).raw_data
        return {
            "login": raw.get("login", login),
            "name": raw.get("name"),
            "bio": raw.get("bio"),
            "company": raw.get("company"),
            "location": raw.get("location"),
            "public_repos": raw.get("public_repos", 0),
            "followers": raw.get("followers", 0),
            "following": raw.get("following", 0),
            "created_at": raw.get("created_at"),
        }

    def list_user_repos(self, login: str, limit: int = 5) -> list[dict]:
        """A user's most recently pushed public repos."""
        repos = []
        with _github_call("user repositories"):
            for i, repo in enumerate(self.gh.get_user(login).get_repos(sort="pushed")):
                if i >= limit:
                    break
                repos.append({
                    "name": repo.name,
                    "language": repo.language,
                    "stargazers_count": repo.stargazers_count,
                    "description": repo.description,
                })
        return repos

    def get_repo_details(self, owner: str, name: str) -> dict:
        with _github_call("repository"):
            raw = self.gh.get_repo(f"{owner}/{name}").raw_data
        return {
            "full_name": raw.get("full_name", f"{owner}/{name}"),
            "description": raw.get("description"),
            "language": raw.get("language"),
            "stargazers_count": raw.get("stargazers_count", 0),
            "forks_count": raw.get("forks_count", 0),
            "open_issues_count": raw.get("open_issues_count", 0),
            "created_at": raw.get("created_at"),
            "pushed_at": raw.get("pushed_at"),
        }

    def recent_commit_messages(self, owner: str, name: str, limit: int = 10) -> list[str]:
        """First lines of a repo's most recent commit messages."""
        messages = []
        with _github_call("commits"):
            for i, commit in enumerate(self.gh.get_repo(f"{owner}/{name}").get_commits()):
                if i >= limit:
                    break
                messages.append((commit.commit.message or "").split("\n", 1)[0])
        return messages

    async def fetch_commit_patch(self, owner: str, name: str, sha: str) -> str:
        """Fetch the raw ``.patch`` text of a commit from github.com."""
        url = f"{GITHUB_WEB_URL}/{owner}/{name}/commit/{sha}.patch"
        headers = {"User-Agent": settings.github_user_agent}
        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            try:
                resp = await client.get(url, headers=headers)
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.warning("Commit patch fetch failed: %s %s", status, url)
                raise GitHubError("Failed to fetch commit patch from GitHub", status, e.response.reason_phrase) from e
            except httpx.RequestError as e:
                logger.error("Commit patch request failed: %s", e)
                raise GitHubError("Failed to fetch commit patch from GitHub", 500, str(e)) from e
        return resp.text
