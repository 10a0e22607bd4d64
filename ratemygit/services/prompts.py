"""Prompt templates for roasts and changelog summaries."""

from __future__ import annotations

import random

from ratemygit.models.roast import RatingLevel, RoastType
from ratemygit.services.render_service import render_prompt

RATING_GUIDANCE = {
    RatingLevel.G: (
        "Keep it family-friendly. Playful teasing only, no profanity, nothing mean-spirited."
    ),
    RatingLevel.PG: (
        "Light sarcasm and mild language are fine. Poke fun, but keep it good-natured."
    ),
    RatingLevel.R: (
        "Be harsh and blunt. Swear freely and call out bad habits, but keep the target the code."
    ),
    RatingLevel.UNHINGED: (
        "No filter. Be savage, chaotic and absurd, profanity welcome. Never attack identity, "
        "only the code and the commit habits."
    ),
}

ROAST_PERSONAS = [
    "You're a brutally honest code reviewer who calls out terrible commit habits. No fluff.",
    "You're a fed-up senior dev who has seen this mistake a thousand times.",
    "You're a no-nonsense code reviewer who delivers short, cutting verdicts.",
    "You're an exasperated git expert who takes version control personally.",
    "You're a stand-up comedian whose whole set is about other people's code.",
]

OUTPUT_FORMAT = """Respond with exactly two lines and nothing else.
Line 1: a tweet-length roast, under 280 characters, no hashtags.
Line 2: a deeper roast of 3-5 sentences that gets specific.
Avoid filler words like "ah" or "oh", and do not label the lines."""

COMMIT_TEMPLATE = """{{ persona }}
{{ rating_guidance }}

Roast this commit from {{ owner }}/{{ repo }} ({{ sha[:7] }}).
{% if author %}
The author is {{ author.login }}{% if author.name %} ({{ author.name }}){% endif %}{% if author.bio %}, whose bio says: "{{ author.bio }}"{% endif %}.
{% endif %}

Patch:
{{ patch }}

{{ output_format }}
"""

PROFILE_TEMPLATE = """{{ persona }}
{{ rating_guidance }}

Roast this GitHub user based on their profile.
Login: {{ profile.login }}
{% if profile.name %}Name: {{ profile.name }}
{% endif %}
{% if profile.bio %}Bio: {{ profile.bio }}
{% endif %}
{% if profile.company %}Company: {{ profile.company }}
{% endif %}
{% if profile.location %}Location: {{ profile.location }}
{% endif %}
Public repos: {{ profile.public_repos }}
Followers: {{ profile.followers }} / Following: {{ profile.following }}
Joined: {{ profile.created_at }}
{% if repos %}

Recently pushed repositories:
{% for r in repos %}
- {{ r.name }}{% if r.language %} [{{ r.language }}]{% endif %} ★{{ r.stargazers_count }}{% if r.description %}: {{ r.description }}{% endif %}

{% endfor %}
{% endif %}

{{ output_format }}
"""

REPOSITORY_TEMPLATE = """{{ persona }}
{{ rating_guidance }}

Roast this GitHub repository.
Repository: {{ repo.full_name }}
{% if repo.description %}Description: {{ repo.description }}
{% endif %}
{% if repo.language %}Language: {{ repo.language }}
{% endif %}
Stars: {{ repo.stargazers_count }} / Forks: {{ repo.forks_count }} / Open issues: {{ repo.open_issues_count }}
Created: {{ repo.created_at }} / Last push: {{ repo.pushed_at }}
{% if commits %}

Recent commit messages:
{% for message in commits %}
- {{ message }}
{% endfor %}
{% endif %}

{{ output_format }}
"""

COMMIT_HISTORY_TEMPLATE = """{{ persona }} Roast this commit in 1-2 savage sentences. Be blunt and skip filler words like "ah" or "oh".

Commit:
{{ commit_history }}

Roast (1-2 sentences max):"""

_TEMPLATES = {
    RoastType.COMMIT: COMMIT_TEMPLATE,
    RoastType.PROFILE: PROFILE_TEMPLATE,
    RoastType.REPOSITORY: REPOSITORY_TEMPLATE,
}

SUMMARY_STYLES = [
    "Create a brief, clean changelog from this git history. Keep it short and organized. "
    "Use simple bullet points with emojis. Focus only on the most important changes.",
    "Generate a concise development summary from these commits. Use bullet points with "
    "relevant emojis. Highlight the key features and fixes.",
    "Transform this commit history into a readable changelog. Use emojis and bullet points. "
    "Focus on user-facing changes and important technical updates.",
    "Create a developer-friendly summary of these commits. Use bullet points with appropriate "
    "emojis. Emphasize the most significant changes and improvements.",
    "Build a clean, organized changelog from this git history. Use emojis and bullets. "
    "Focus on features, fixes, and notable changes.",
]

EMOJI_SETS = [
    ["🚀", "🐛", "✨", "🔧", "📝", "🎨", "⚡", "🔒"],
    ["🌟", "🛠️", "💡", "🔥", "📦", "🎯", "⭐", "🚨"],
    ["✅", "🎉", "🔨", "💫", "📊", "🎪", "⚙️", "🌈"],
    ["🚧", "💎", "🎭", "🔮", "📈", "🎨", "⚡", "🌸"],
]

SUMMARY_TEMPLATE = """{{ style }} Choose from these emojis: {{ emojis | join(' ') }}

Commit history:
{{ commit_history }}

Brief changelog (max 4-5 bullet points):"""


def build_roast_prompt(
    roast_type: RoastType,
    rating: RatingLevel,
    variables: dict,
    rng: random.Random | None = None,
) -> str:
    """Render the roast template for ``roast_type`` with a random persona."""
    rng = rng or random
    context = {
        "persona": rng.choice(ROAST_PERSONAS),
        "rating_guidance": RATING_GUIDANCE[rating],
        "output_format": OUTPUT_FORMAT,
        **variables,
    }
    return render_prompt(_TEMPLATES[roast_type], context)


def build_summary_prompt(commit_history: str, rng: random.Random | None = None) -> str:
    rng = rng or random
    return render_prompt(
        SUMMARY_TEMPLATE,
        {
            "style": rng.choice(SUMMARY_STYLES),
            "emojis": rng.choice(EMOJI_SETS),
            "commit_history": commit_history,
        },
    )


def build_commit_history_roast_prompt(commit_history: str, rng: random.Random | None = None) -> str:
    rng = rng or random
    return render_prompt(
        COMMIT_HISTORY_TEMPLATE,
        {"persona": rng.choice(ROAST_PERSONAS), "commit_history": commit_history},
    )
