"""Async LLM client with Ollama and OpenAI-compatible API support."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import httpx

from name_hunter.infra.config import (
    LLM_API_KEY,
    LLM_BASE_URL,
    LLM_MAX_TOKENS,
    LLM_MODEL,
    LLM_PROVIDER,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL,
)

if TYPE_CHECKING:
    from name_hunter.infra.openai_client import OpenAICompatibleClient

logger = logging.getLogger(__name__)


@dataclass
class LlmUsage:
    """Token usage from an LLM call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class TextGenerator(Protocol):
    """What the extraction layer needs from an LLM backend."""

    model: str

    async def generate(
        self,
        system: str,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = LLM_MAX_TOKENS,
        timeout: int = 120,
    ) -> tuple[str, LlmUsage]: ...


# Global semaphore to serialize Ollama calls (single GPU processes one request at a time).
_llm_semaphore: asyncio.Semaphore | None = None


def _get_semaphore() -> asyncio.Semaphore:
    """Lazily create semaphore in the running event loop."""
    global _llm_semaphore
    if _llm_semaphore is None:
        _llm_semaphore = asyncio.Semaphore(1)
    return _llm_semaphore


class LLMError(Exception):
    """Base exception for LLM client errors."""


class LLMTimeoutError(LLMError):
    """Raised when LLM request times out."""


class LLMParseError(LLMError):
    """Raised when JSON parsing of LLM response fails."""


class LLMClient:
    """Async client for Ollama chat API."""

    def __init__(
        self,
        base_url: str = OLLAMA_BASE_URL,
        model: str = OLLAMA_MODEL,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model

    async def generate(
        self,
        system: str,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = LLM_MAX_TOKENS,
        timeout: int = 120,
    ) -> tuple[str, LlmUsage]:
        """Call Ollama chat API. Returns (content, usage) tuple."""
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        payload: dict = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "think": False,  # qwen3: answer directly, no reasoning preamble
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        sem = _get_semaphore()
        async with sem:
            logger.debug("LLM semaphore acquired for generate()")
            try:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(timeout, connect=10.0)
                ) as client:
                    resp = await client.post(
                        f"{self.base_url}/api/chat",
                        json=payload,
                    )
                    resp.raise_for_status()
            except httpx.TimeoutException as exc:
                raise LLMTimeoutError(
                    f"Ollama request timed out after {timeout}s"
                ) from exc
            except httpx.HTTPStatusError as exc:
                raise LLMError(
                    f"Ollama HTTP error {exc.response.status_code}: {exc.response.text[:300]}"
                ) from exc

        data = resp.json()
        content: str = data.get("message", {}).get("content", "")
        if not content:
            raise LLMError("Empty response from Ollama")

        prompt_tokens = data.get("prompt_eval_count", 0)
        completion_tokens = data.get("eval_count", 0)
        usage = LlmUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )
        return content, usage


# Module-level singleton
_client: LLMClient | OpenAICompatibleClient | None = None


def get_llm_client() -> LLMClient | OpenAICompatibleClient:
    """Return module-level singleton LLM client based on LLM_PROVIDER config."""
    global _client
    if _client is None:
        if LLM_PROVIDER == "openai":
            if not LLM_API_KEY:
                raise ValueError("LLM_API_KEY is required when LLM_PROVIDER=openai")
            if not LLM_BASE_URL:
                raise ValueError("LLM_BASE_URL is required when LLM_PROVIDER=openai")
            from name_hunter.infra.openai_client import OpenAICompatibleClient

            _client = OpenAICompatibleClient(
                base_url=LLM_BASE_URL,
                api_key=LLM_API_KEY,
                model=LLM_MODEL or "gpt-4o-mini",
            )
        else:
            _client = LLMClient()
    return _client
