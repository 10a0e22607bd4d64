"""Chat-completion providers (Claude, OpenAI) with key-based selection and one-shot fallback."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from ratemygit.config import settings

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

OPENAI_MODEL_PREFIXES = ("gpt", "o1", "o3", "o4", "chatgpt")


class LLMError(Exception):
    """Base LLM error."""


class LLMNotConfiguredError(LLMError):
    """Raised when neither provider has an API key."""


@runtime_checkable
class ChatProvider(Protocol):
    """A chat/completion capability backed by one vendor API."""

    name: str
    default_model: str

    async def complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> str: ...


class ClaudeProvider:
    name = "anthropic"

    def __init__(self, api_key: str, default_model: str):
        self._api_key = api_key
        self.default_model = default_model

    async def complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> str:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        data = await _post_json(ANTHROPIC_MESSAGES_URL, payload, headers, "Claude")
        try:
            text = "".join(
                block.get("text", "")
                for block in data["content"]
                if block.get("type", "text") == "text"
            )
        except (KeyError, TypeError) as e:
            raise LLMError("Claude API returned an unexpected payload") from e
        return text


class OpenAIProvider:
    name = "openai"

    def __init__(self, api_key: str, default_model: str):
        self._api_key = api_key
        self.default_model = default_model

    async def complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> str:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        data = await _post_json(OPENAI_CHAT_URL, payload, headers, "OpenAI")
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError("OpenAI API returned an unexpected payload") from e


async def _post_json(url: str, payload: dict, headers: dict, label: str) -> dict:
    async with httpx.AsyncClient(timeout=60.0) as client:
        try:
            resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("%s API error: %s %s", label, e.response.status_code, e.response.text[:200])
            raise LLMError(f"{label} API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("%s request failed: %s", label, e)
            raise LLMError(f"{label} request failed: {e}") from e
    try:
        return resp.json()
    except ValueError as e:
        raise LLMError(f"{label} API returned invalid JSON") from e


def provider_name_for_model(model: str) -> str | None:
    """Map a model identifier to the provider that serves it."""
    lowered = model.lower()
    if lowered.startswith("claude"):
        return ClaudeProvider.name
    if lowered.startswith(OPENAI_MODEL_PREFIXES):
        return OpenAIProvider.name
    return None


def configured_providers() -> dict[str, ChatProvider]:
    providers: dict[str, ChatProvider] = {}
    if settings.anthropic_api_key:
        providers[ClaudeProvider.name] = ClaudeProvider(settings.anthropic_api_key, settings.claude_model)
    if settings.openai_api_key:
        providers[OpenAIProvider.name] = OpenAIProvider(settings.openai_api_key, settings.openai_model)
    return providers


def select_providers(model: str | None = None) -> list[tuple[ChatProvider, str]]:
    """Return the ordered (provider, model) attempts: primary first, then one fallback.

    An explicitly requested model wins when its provider is configured;
    otherwise Claude is preferred over OpenAI. The fallback always uses the
    other provider's default model.
    """
    providers = configured_providers()
    if not providers:
        raise LLMNotConfiguredError("No AI API key configured")

    primary: tuple[ChatProvider, str] | None = None
    if model:
        requested = provider_name_for_model(model)
        if requested in providers:
            primary = (providers[requested], model)
        else:
            logger.info("Requested model %s has no configured provider, using default", model)

    if primary is None:
        provider = providers.get(ClaudeProvider.name) or providers[OpenAIProvider.name]
        primary = (provider, provider.default_model)

    attempts = [primary]
    for name, provider in providers.items():
        if name != primary[0].name:
            attempts.append((provider, provider.default_model))
            break
    return attempts


async def complete_with_fallback(
    prompt: str,
    *,
    model: str | None = None,
    max_tokens: int = 500,
    temperature: float = 1.0,
) -> tuple[str, str]:
    """Run the prompt against the selected provider. Returns (text, model_used).

    Raises:
        LLMNotConfiguredError: If no API key is set.
        LLMError: If every attempted provider fails.
    """
    attempts = select_providers(model)
    last_error: LLMError | None = None
    for i, (provider, attempt_model) in enumerate(attempts):
        try:
            text = await provider.complete(
                prompt, model=attempt_model, max_tokens=max_tokens, temperature=temperature
            )
            return text, attempt_model
        except LLMError as e:
            last_error = e
            if i + 1 < len(attempts):
                logger.info("Provider %s failed, falling back: %s", provider.name, e)
    if last_error is None:
        raise LLMError("No LLM provider was attempted")
    raise last_error
