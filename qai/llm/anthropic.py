"""
Client for Anthropic's Messages API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import DEFAULT_MAX_TOKENS, LLMClient

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(LLMClient):
    """System prompt is a top-level field; auth uses `x-api-key`."""

    def build_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def build_payload(self, system: str, messages: List[Dict[str, Any]], *, stream: bool) -> Dict[str, Any]:
        payload = self._common_fields(stream=stream)
        payload["max_tokens"] = self.max_output_tokens or DEFAULT_MAX_TOKENS
        payload["system"] = system
        payload["messages"] = messages
        return payload

    def extract_content(self, body: Dict[str, Any]) -> str:
        return body["content"][0]["text"]

    def extract_finish_reason(self, body: Dict[str, Any]) -> Optional[str]:
        return body.get("stop_reason")
