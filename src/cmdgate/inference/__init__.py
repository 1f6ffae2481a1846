"""Managed inference module for cmdgate.

Provides a provider-agnostic interface for the router's ``/ai`` route.

Public API:
    InferenceProvider -- Abstract base class
    AnthropicProvider -- Claude API implementation
    OpenAIProvider -- OpenAI / OpenRouter implementation
"""

from cmdgate.inference.base import InferenceError, InferenceProvider, InferenceResult

__all__ = [
    "InferenceError",
    "InferenceProvider",
    "InferenceResult",
    "AnthropicProvider",
    "OpenAIProvider",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "AnthropicProvider":
        from cmdgate.inference.anthropic import AnthropicProvider
        return AnthropicProvider
    if name == "OpenAIProvider":
        from cmdgate.inference.openai import OpenAIProvider
        return OpenAIProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
