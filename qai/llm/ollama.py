"""
Client for a local Ollama server (`/api/chat`).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .http_client import OpenAICompatibleClient


LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaClient(OpenAICompatibleClient):
    """
    Same message shape as the OpenAI dialect; responses carry `message.content`
    and streams are NDJSON objects with a boolean `done` field.
    """

    def __init__(self, model: str, *, url: str, api_key: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("requires_api_key", False)
        super().__init__(model, url=url, api_key=api_key, **kwargs)

    def build_payload(self, system: str, messages: List[Dict[str, Any]], *, stream: bool) -> Dict[str, Any]:
        payload = self._common_fields(stream=stream)
        payload["messages"] = [{"role": "system", "content": system}] + messages
        if self.max_output_tokens is not None:
            payload["options"] = {"num_predict": self.max_output_tokens}
        return payload

    def extract_content(self, body: Dict[str, Any]) -> str:
        return body["message"].get("content") or ""

    def extract_finish_reason(self, body: Dict[str, Any]) -> Optional[str]:
        return body.get("done_reason")


def list_ollama_models(base_url: str = DEFAULT_BASE_URL, *, timeout: float = 5.0) -> List[str]:
    """Names of the models pulled into a local Ollama server, or `[]`."""
    url = f"{base_url.rstrip('/')}/api/tags"
    try:
        response = requests.get(url, timeout=timeout)
        body = response.json()
    except (requests.RequestException, ValueError) as exc:
        LOGGER.warning("Cannot list Ollama models at %s: %s", base_url, exc)
        return []
    models = body.get("models") if isinstance(body, dict) else None
    if not isinstance(models, list):
        return []
    return [model["name"] for model in models if isinstance(model, dict) and isinstance(model.get("name"), str)]
