"""Tweet text for sharing a roast."""

from __future__ import annotations

import re
from urllib.parse import quote

TWEET_MAX_LENGTH = 240  # leaves room for the link card and hashtags
TWEET_PREFIX = "🔥 Just got roasted by RateMyGit! Here's what AI thinks of my commits:\n\n"
TWEET_SUFFIX = "\n\nGet your commits roasted at ratemygit.com #GitRoast #CodeReview"
TWITTER_INTENT_URL = "https://twitter.com/intent/tweet"

_TAG_RE = re.compile(r"<[^>]*>")


def format_roast_for_twitter(
    content: str,
    roast_type: str = "main",
    repo_name: str | None = None,
    commit_title: str | None = None,
) -> str:
    clean = _TAG_RE.sub("", content).strip()

    text = TWEET_PREFIX
    if roast_type == "commit" and commit_title:
        text += f'"{commit_title}"\n\n'
    elif roast_type == "main" and repo_name:
        text += f"Repo: {repo_name}\n\n"

    remaining = TWEET_MAX_LENGTH - len(text) - len(TWEET_SUFFIX)
    if len(clean) > remaining:
        clean = clean[: max(remaining - 3, 0)] + "..."
    return text + clean + TWEET_SUFFIX


def twitter_intent_url(text: str) -> str:
    return f"{TWITTER_INTENT_URL}?text={quote(text, safe='')}"
