"""
Provider registry and client factory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Type

from .anthropic import AnthropicClient
from .base import DEFAULT_MAX_TOKENS, DEFAULT_TIMEOUT, LLMClient
from .http_client import OpenAICompatibleClient
from .ollama import OllamaClient


class Dialect(str, Enum):
    """Wire format family spoken by a provider."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OLLAMA = "ollama"


_DIALECT_CLIENTS: Dict[Dialect, Type[LLMClient]] = {
    Dialect.ANTHROPIC: AnthropicClient,
    Dialect.OPENAI: OpenAICompatibleClient,
    Dialect.OLLAMA: OllamaClient,
}


@dataclass(frozen=True)
class ProviderSpec:
    """
    Minimal configuration required to talk to a chat endpoint.
    """

    name: str
    label: str
    dialect: Dialect
    api_url: str
    default_model: str
    api_key_env: Optional[str] = None
    requires_api_key: bool = True

    def resolve_api_key(self, explicit: Optional[str] = None) -> str:
        if explicit and explicit.strip():
            return explicit.strip()
        if self.api_key_env:
            return os.getenv(self.api_key_env, "").strip()
        return ""

    def resolve_url(self, explicit: Optional[str] = None) -> str:
        if explicit and explicit.strip():
            return explicit.strip()
        return self.api_url


CUSTOM_PROVIDER = "custom"

_PROVIDER_REGISTRY: Dict[str, ProviderSpec] = {
    "openai": ProviderSpec(
        name="openai",
        label="OpenAI (GPT-4o)",
        dialect=Dialect.OPENAI,
        api_url="https://api.openai.com/v1/chat/completions",
        default_model="gpt-4o",
        api_key_env="OPENAI_API_KEY",
    ),
    "anthropic": ProviderSpec(
        name="anthropic",
        label="Anthropic (Claude)",
        dialect=Dialect.ANTHROPIC,
        api_url="https://api.anthropic.com/v1/messages",
        default_model="claude-3-5-sonnet-20241022",
        api_key_env="ANTHROPIC_API_KEY",
    ),
    "xai": ProviderSpec(
        name="xai",
        label="xAI (Grok)",
        dialect=Dialect.OPENAI,
        api_url="https://api.x.ai/v1/chat/completions",
        default_model="grok-3",
        api_key_env="XAI_API_KEY",
    ),
    "ollama": ProviderSpec(
        name="ollama",
        label="Ollama (local)",
        dialect=Dialect.OLLAMA,
        api_url="http://localhost:11434/api/chat",
        default_model="gemma3",
        requires_api_key=False,
    ),
    "zen": ProviderSpec(
        name="zen",
        label="Zen API",
        dialect=Dialect.OPENAI,
        api_url="https://api.opencode.ai/v1/chat/completions",
        default_model="anthropic/claude-sonnet-4-5",
        api_key_env="ZEN_API_KEY",
    ),
    CUSTOM_PROVIDER: ProviderSpec(
        name=CUSTOM_PROVIDER,
        label="Custom endpoint",
        dialect=Dialect.OPENAI,
        api_url="",
        default_model="custom-model",
        api_key_env="QAI_API_KEY",
    ),
}


def register_provider(spec: ProviderSpec) -> None:
    """
    Allow users to register additional providers at runtime.
    """

    _PROVIDER_REGISTRY[spec.name] = spec


def list_providers() -> Iterable[str]:
    return tuple(_PROVIDER_REGISTRY.keys())


def get_provider(provider: str) -> ProviderSpec:
    try:
        return _PROVIDER_REGISTRY[provider]
    except KeyError as exc:
        raise ValueError(f"Unknown provider '{provider}'. Available: {list_providers()}") from exc


def create_chat_completion_client(
    provider: str,
    model: Optional[str] = None,
    *,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_output_tokens: Optional[int] = DEFAULT_MAX_TOKENS,
    temperature: Optional[float] = None,
) -> LLMClient:
    """
    Instantiate the client for a registered provider's dialect.

    `base_url` overrides the provider URL; for the custom provider it is the
    only URL. Missing credentials or URLs surface as `LLMError` at call time.
    """

    spec = get_provider(provider)
    client_cls = _DIALECT_CLIENTS[spec.dialect]
    kwargs = dict(
        url=spec.resolve_url(base_url),
        api_key=spec.resolve_api_key(api_key),
        timeout=timeout,
        max_output_tokens=max_output_tokens,
        temperature=temperature,
    )
    if issubclass(client_cls, OpenAICompatibleClient):
        kwargs["requires_api_key"] = spec.requires_api_key
    return client_cls((model or "").strip() or spec.default_model, **kwargs)
