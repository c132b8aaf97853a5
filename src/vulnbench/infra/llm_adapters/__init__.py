from .types import Provider, TokenUsage, LLMResponse
from .interface import LLMAdapter
from .openai_adapter import OpenAIAdapter
from .anthropic_adapter import AnthropicAdapter
from .factory import get_adapter

__all__ = [
    "Provider",
    "TokenUsage",
    "LLMResponse",
    "LLMAdapter",
    "OpenAIAdapter",
    "AnthropicAdapter",
    "get_adapter",
]
