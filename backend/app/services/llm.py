"""
LLM Chat Provider

Unified interface over the chat-completion providers (Anthropic / OpenAI).
The provider and model are chosen by configuration (LLM_PROVIDER, LLM_MODEL);
every request is retried a fixed number of times with a fixed delay.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_fixed

from app.core.errors import UpstreamError
from ..config import settings

logger = logging.getLogger("uvicorn.error")


class Completer(ABC):
    """Chat Provider Abstract Base Class"""

    @abstractmethod
    async def complete(self, model: str, prompt: str) -> str:
        """
        Send a single-turn prompt and return the generated text

        Parameters:
        - model: Provider model identifier
        - prompt: Full prompt (context + question) sent as one user message
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider API key is configured"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def key_env(self) -> str:
        """Environment variable holding the API key"""
        pass


class OpenAICompleter(Completer):
    """OpenAI Chat Completions API"""

    def __init__(self):
        self.api_key = settings.openai_api_key
        self.api_url = settings.openai_api_url

    @property
    def name(self) -> str:
        return "OpenAI"

    @property
    def key_env(self) -> str:
        return "OPENAI_API_KEY"

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def complete(self, model: str, prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": settings.llm_max_tokens,
        }
        async with httpx.AsyncClient(timeout=60) as client:
            resp = await client.post(self.api_url, headers=headers, json=payload)
            resp.raise_for_status()
            result = resp.json()
        return result["choices"][0]["message"]["content"] or ""


class AnthropicCompleter(Completer):
    """Anthropic Messages API"""

    def __init__(self):
        self.api_key = settings.anthropic_api_key
        self.api_url = settings.anthropic_api_url

    @property
    def name(self) -> str:
        return "Anthropic"

    @property
    def key_env(self) -> str:
        return "ANTHROPIC_API_KEY"

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def complete(self, model: str, prompt: str) -> str:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": settings.anthropic_version,
            "content-type": "application/json",
        }
        payload = {
            "model": model,
            "max_tokens": settings.llm_max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        async with httpx.AsyncClient(timeout=60) as client:
            resp = await client.post(self.api_url, headers=headers, json=payload)
            resp.raise_for_status()
            result = resp.json()
        blocks = result.get("content") or []
        if blocks and blocks[0].get("type") == "text":
            return blocks[0].get("text", "")
        return ""


_PROVIDERS = {
    "openai": OpenAICompleter,
    "anthropic": AnthropicCompleter,
}

# Lazily constructed, one client per provider
_completers: Dict[str, Completer] = {}


def get_completer(provider: str) -> Completer:
    """
    Get the completer for a provider name (case-insensitive)

    Raises:
    - UpstreamError: unknown provider
    """
    key = (provider or "").lower()
    if key not in _PROVIDERS:
        raise UpstreamError(f"Unsupported LLM provider: {provider}")
    if key not in _completers:
        _completers[key] = _PROVIDERS[key]()
    return _completers[key]


def reset_completers() -> None:
    """Drop cached clients so they are rebuilt from current settings."""
    _completers.clear()


async def send_llm_request(provider: str, model: str, prompt: str,
                           max_attempts: Optional[int] = None,
                           retry_delay: Optional[float] = None) -> str:
    """
    Send a prompt to the configured provider with fixed-delay retries

    Parameters:
    - provider: "anthropic" or "openai"
    - model: Provider model identifier
    - prompt: Full prompt text
    - max_attempts / retry_delay: override LLM_MAX_ATTEMPTS / LLM_RETRY_DELAY

    Returns:
    - Generated text

    Raises:
    - UpstreamError: unknown provider, missing API key, or every attempt failed
    """
    completer = get_completer(provider)
    if not completer.is_available():
        raise UpstreamError(f"{completer.key_env} environment variable is not set")

    attempts = max_attempts if max_attempts is not None else settings.llm_max_attempts
    delay = retry_delay if retry_delay is not None else settings.llm_retry_delay

    try:
        async for attempt in AsyncRetrying(stop=stop_after_attempt(attempts), wait=wait_fixed(delay)):
            with attempt:
                n = attempt.retry_state.attempt_number
                logger.info("[llm] Sending request to %s with model %s (attempt %d)", completer.name, model, n)
                try:
                    text = await completer.complete(model, prompt)
                except Exception:
                    logger.exception("[llm] Error sending request to %s (attempt %d)", completer.name, n)
                    raise
    except RetryError as e:
        last = e.last_attempt.exception()
        raise UpstreamError(f"{completer.name} request failed after {attempts} attempts: {last}") from last

    logger.info("[llm] Received response from %s", completer.name)
    return text
