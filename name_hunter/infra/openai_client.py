"""Async client for OpenAI-compatible APIs (Gemini OpenAI endpoint, DeepSeek, Qwen Cloud, etc.)."""

from __future__ import annotations

import asyncio
import logging

import httpx

from name_hunter.infra.config import LLM_MAX_TOKENS
from name_hunter.infra.llm_client import LLMError, LLMTimeoutError, LlmUsage

logger = logging.getLogger(__name__)


# Cloud APIs accept parallel requests; at most 3 in flight.
_cloud_semaphore: asyncio.Semaphore | None = None


def _get_cloud_semaphore() -> asyncio.Semaphore:
    """Lazily create semaphore in the running event loop."""
    global _cloud_semaphore
    if _cloud_semaphore is None:
        _cloud_semaphore = asyncio.Semaphore(3)
    return _cloud_semaphore


class OpenAICompatibleClient:
    """Async client for OpenAI-compatible chat completion APIs."""

    def __init__(self, base_url: str, api_key: str, model: str):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _make_client(self, timeout: float | httpx.Timeout) -> httpx.AsyncClient:
        """Create httpx client that bypasses system proxy env vars."""
        transport = httpx.AsyncHTTPTransport()
        return httpx.AsyncClient(transport=transport, timeout=timeout)

    async def generate(
        self,
        system: str,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = LLM_MAX_TOKENS,
        timeout: int = 120,
    ) -> tuple[str, LlmUsage]:
        """Call the chat completions endpoint. Returns (content, usage)."""
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        payload: dict = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }

        sem = _get_cloud_semaphore()
        async with sem:
            logger.debug("Cloud semaphore acquired for generate()")
            try:
                async with self._make_client(
                    httpx.Timeout(timeout, connect=10.0)
                ) as client:
                    resp = await client.post(
                        f"{self.base_url}/chat/completions",
                        json=payload,
                        headers=self._headers(),
                    )
                    resp.raise_for_status()
            except httpx.TimeoutException as exc:
                raise LLMTimeoutError(
                    f"Cloud API request timed out after {timeout}s"
                ) from exc
            except httpx.HTTPStatusError as exc:
                raise LLMError(
                    f"Cloud API HTTP error {exc.response.status_code}: "
                    f"{exc.response.text[:300]}"
                ) from exc

        data = resp.json()
        choices = data.get("choices", [])
        if not choices:
            raise LLMError("Empty choices in cloud API response")

        choice = choices[0]
        content: str = choice.get("message", {}).get("content", "")
        if not content:
            raise LLMError("Empty content in cloud API response")

        if choice.get("finish_reason", "") == "length":
            # Truncated output is left to the JSON recovery step downstream
            logger.warning(
                "Cloud API output truncated (finish_reason=length, %d chars)",
                len(content),
            )

        raw_usage = data.get("usage") or {}
        usage = LlmUsage(
            prompt_tokens=raw_usage.get("prompt_tokens", 0),
            completion_tokens=raw_usage.get("completion_tokens", 0),
            total_tokens=raw_usage.get("total_tokens", 0),
        )
        return content, usage
