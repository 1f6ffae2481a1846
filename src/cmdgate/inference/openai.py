"""OpenAI-compatible inference provider.

Works with OpenAI, OpenRouter, and any OpenAI-compatible API
by setting a custom base_url.
"""

from __future__ import annotations

import logging

from cmdgate.inference.base import InferenceError, InferenceProvider, InferenceResult

logger = logging.getLogger(__name__)


class OpenAIProvider(InferenceProvider):
    """Inference provider using OpenAI's chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        max_tokens: int = 512,
    ) -> None:
        super().__init__(model=model, max_tokens=max_tokens)
        self._api_key = api_key
        self._base_url = base_url
        self._client = None

    async def _ensure_client(self) -> None:
        """Lazily initialize the OpenAI async client."""
        if self._client is not None:
            return
        from openai import AsyncOpenAI
        kwargs = {"api_key": self._api_key}
        if self._base_url:
            kwargs["base_url"] = self._base_url
        self._client = AsyncOpenAI(**kwargs)
        logger.info("Initialized OpenAI client (model=%s, base_url=%s)", self._model, self._base_url)

    async def run(self, prompt: str) -> InferenceResult:
        await self._ensure_client()
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            raise InferenceError(f"OpenAI API call failed: {e}", provider="openai") from e

        text = response.choices[0].message.content or ""
        logger.debug("Inference response: %s", text[:200])
        return InferenceResult(response=text, model=self._model, provider="openai")
