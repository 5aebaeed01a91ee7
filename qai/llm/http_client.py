"""
HTTP implementation for OpenAI-compatible chat endpoints.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import LLMClient


class OpenAICompatibleClient(LLMClient):
    """
    Generic client that targets OpenAI-style chat completion APIs.

    The system prompt travels as the first message; auth is a bearer header,
    omitted when no key is configured.
    """

    def __init__(
        self,
        model: str,
        *,
        url: str,
        api_key: str = "",
        default_headers: Optional[Dict[str, str]] = None,
        requires_api_key: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(model, url=url, api_key=api_key, **kwargs)
        self.requires_api_key = requires_api_key
        self.default_headers = dict(default_headers or {})

    def build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        headers.update(self.default_headers)
        return headers

    def build_payload(self, system: str, messages: List[Dict[str, Any]], *, stream: bool) -> Dict[str, Any]:
        payload = self._common_fields(stream=stream)
        payload["messages"] = [{"role": "system", "content": system}] + messages
        if self.max_output_tokens is not None:
            payload["max_tokens"] = self.max_output_tokens
        return payload

    def extract_content(self, body: Dict[str, Any]) -> str:
        return body["choices"][0]["message"].get("content") or ""

    def extract_finish_reason(self, body: Dict[str, Any]) -> Optional[str]:
        choices = body.get("choices") or [{}]
        return choices[0].get("finish_reason")
