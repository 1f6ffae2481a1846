"""Abstract base class for managed text-generation providers.

All provider implementations must conform to this interface, enabling
the router's ``/ai`` route to swap between providers without changing
anything else.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class InferenceResult(BaseModel):
    """Structured result of one text-generation call."""

    model_config = ConfigDict(frozen=True)

    response: str = Field(description="Generated text")
    model: str = Field(description="Model that produced the response")
    provider: str


class InferenceProvider(ABC):
    """Abstract interface for text-generation providers."""

    def __init__(self, model: str, max_tokens: int = 512) -> None:
        self._model = model
        self._max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    async def run(self, prompt: str) -> InferenceResult:
        """Generate a completion for the prompt.

        Raises:
            InferenceError: If the API call fails.
        """
        ...


class InferenceError(Exception):
    """Raised when a managed inference call fails."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider
