from __future__ import annotations

from .anthropic_adapter import AnthropicAdapter
from .interface import LLMAdapter
from .openai_adapter import OpenAIAdapter


def get_adapter(provider: str, model: str, api_key: str) -> LLMAdapter:
    """Factory that returns an adapter for the requested provider/model."""
    if provider == "openai":
        return OpenAIAdapter(model, api_key)
    if provider == "anthropic":
        return AnthropicAdapter(model, api_key)
    raise ValueError("provider must be 'openai' or 'anthropic'")
