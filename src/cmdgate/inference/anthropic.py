"""Anthropic Claude inference provider.

Uses the Anthropic Python SDK's messages API for plain text prompts.
"""

from __future__ import annotations

import logging

from cmdgate.inference.base import InferenceError, InferenceProvider, InferenceResult

logger = logging.getLogger(__name__)


class AnthropicProvider(InferenceProvider):
    """Inference provider using Anthropic's Claude API.

    Example usage::

        provider = AnthropicProvider(api_key="sk-ant-...", model="claude-3-5-haiku-latest")
        result = await provider.run("What is the origin of the phrase Hello, World?")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        max_tokens: int = 512,
    ) -> None:
        super().__init__(model=model, max_tokens=max_tokens)
        self._api_key = api_key
        self._client = None

    async def _ensure_client(self) -> None:
        """Lazily initialize the Anthropic async client."""
        if self._client is not None:
            return
        import anthropic
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        logger.info("Initialized Anthropic client (model=%s)", self._model)

    async def run(self, prompt: str) -> InferenceResult:
        await self._ensure_client()
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            raise InferenceError(f"Anthropic API call failed: {e}", provider="anthropic") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return InferenceResult(response=text, model=self._model, provider="anthropic")
