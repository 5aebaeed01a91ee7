"""
Base interfaces for LLM chat clients.

A client owns its wire dialect (request body, headers, response shape); the
HTTP round trip, error mapping and stream consumption are shared here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

import requests

from ..core.primitives.messages import HistoryItem, coerce_history, coerce_messages
from .streaming import CancelToken, End, StreamEvent, decode_stream_line


LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_TOKENS = 2048


class LLMError(RuntimeError):
    """Raised when an LLM request fails."""


@dataclass
class LLMResponse:
    content: str
    finish_reason: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None
    raw: Optional[Dict[str, Any]] = None


class LLMClient(ABC):
    """
    Abstract base class for all chat clients.
    """

    requires_api_key: bool = True

    def __init__(
        self,
        model: str,
        *,
        url: str,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        max_output_tokens: Optional[int] = DEFAULT_MAX_TOKENS,
        temperature: Optional[float] = None,
    ) -> None:
        self.model = model
        self.url = url.strip()
        self.api_key = (api_key or "").strip()
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature

    @abstractmethod
    def build_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    @abstractmethod
    def build_payload(self, system: str, messages: List[Dict[str, Any]], *, stream: bool) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def extract_content(self, body: Dict[str, Any]) -> str:
        raise NotImplementedError

    def extract_finish_reason(self, body: Dict[str, Any]) -> Optional[str]:
        return None

    def _common_fields(self, *, stream: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "stream": stream}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload

    def _check_ready(self) -> None:
        if not self.url:
            raise LLMError("Custom endpoint URL is empty")
        if self.requires_api_key and not self.api_key:
            raise LLMError("API token is empty")

    def _post(self, payload: Dict[str, Any], *, stream: bool) -> requests.Response:
        self._check_ready()
        try:
            response = requests.post(
                self.url,
                json=payload,
                headers=self.build_headers(),
                timeout=self.timeout,
                stream=stream,
            )
        except requests.RequestException as exc:
            raise LLMError(f"LLM request failed: {exc}") from exc
        if response.status_code >= 400:
            text = response.text
            response.close()
            raise LLMError(f"LLM request failed ({response.status_code}): {text}")
        return response

    def chat(self, system: str, history: Iterable[HistoryItem]) -> LLMResponse:
        messages = coerce_messages(coerce_history(history))
        payload = self.build_payload(system, messages, stream=False)
        response = self._post(payload, stream=False)
        try:
            body = response.json()
        except ValueError as exc:
            raise LLMError(f"LLM returned a non-JSON body: {response.text[:500]}") from exc
        if not isinstance(body, dict):
            raise LLMError(f"Malformed response structure: {body}")
        try:
            content = self.extract_content(body)
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError(f"Malformed response structure: {body}") from exc
        return LLMResponse(
            content=content,
            finish_reason=self.extract_finish_reason(body),
            usage=body.get("usage"),
            raw=body,
        )

    def call(self, system: str, history: Iterable[HistoryItem]) -> str:
        """Non-streaming request; returns the full response text."""
        return self.chat(system, history).content

    def stream(
        self,
        system: str,
        history: Iterable[HistoryItem],
        cancel: Optional[CancelToken] = None,
    ) -> Iterator[StreamEvent]:
        """
        Streaming request yielding `Token` events and exactly one final `End`.

        A cancellation stops consumption at once; tokens already yielded stay
        delivered.
        """
        cancel = cancel or CancelToken()
        if cancel.cancelled:
            yield End()
            return
        messages = coerce_messages(coerce_history(history))
        response = self._post(self.build_payload(system, messages, stream=True), stream=True)
        cancel.bind(response)
        try:
            for line in response.iter_lines():
                if cancel.cancelled:
                    break
                for event in decode_stream_line(line):
                    if isinstance(event, End):
                        yield event
                        return
                    yield event
        except Exception as exc:
            if not cancel.cancelled:
                raise LLMError(f"Stream interrupted: {exc}") from exc
            LOGGER.debug("Stream closed by cancellation: %s", exc)
        finally:
            cancel.unbind()
            response.close()
        yield End()
