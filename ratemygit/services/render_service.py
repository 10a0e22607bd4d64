"""Prompt rendering on a sandboxed Jinja2 environment."""

from __future__ import annotations

import functools
import logging

from jinja2 import BaseLoader, StrictUndefined, Template
from jinja2.sandbox import SandboxedEnvironment

logger = logging.getLogger(__name__)

# Commit messages, bios and patches are user-controlled and end up in templates
_env = SandboxedEnvironment(
    loader=BaseLoader(),
    autoescape=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


@functools.lru_cache(maxsize=32)
def _compile(template_body: str) -> Template:
    return _env.from_string(template_body)


def render_prompt(template_body: str, variables: dict) -> str:
    """Render a prompt template; a variable the template uses but is not given is an error."""
    try:
        return _compile(template_body).render(**variables)
    except Exception as e:
        logger.error("Prompt rendering failed: %s", e)
        raise ValueError(f"Template rendering failed: {e}") from e
