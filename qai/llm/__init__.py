"""
Convenience exports for built-in LLM clients.
"""

from .anthropic import AnthropicClient
from .base import LLMClient, LLMError, LLMResponse
from .http_client import OpenAICompatibleClient
from .ollama import OllamaClient, list_ollama_models
from .providers import (
    CUSTOM_PROVIDER,
    Dialect,
    ProviderSpec,
    create_chat_completion_client,
    get_provider,
    list_providers,
    register_provider,
)
from .streaming import CancelToken, End, StreamEvent, Token, decode_stream_line

__all__ = [
    "AnthropicClient",
    "LLMClient",
    "LLMError",
    "LLMResponse",
    "OpenAICompatibleClient",
    "OllamaClient",
    "list_ollama_models",
    "CUSTOM_PROVIDER",
    "Dialect",
    "ProviderSpec",
    "create_chat_completion_client",
    "get_provider",
    "list_providers",
    "register_provider",
    "CancelToken",
    "End",
    "StreamEvent",
    "Token",
    "decode_stream_line",
]
