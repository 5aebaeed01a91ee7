"""
Uniform stream events and line decoding for the three provider dialects.

Every streamed line, whether an SSE `data: {...}` frame (Anthropic and
OpenAI-compatible servers) or a bare NDJSON object (Ollama), is decoded into
`Token` / `End` events by `decode_stream_line`.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union


LOGGER = logging.getLogger(__name__)

SSE_PREFIX = "data:"
SSE_DONE = "[DONE]"


@dataclass(frozen=True)
class Token:
    """An incremental text delta."""

    text: str


@dataclass(frozen=True)
class End:
    """Terminal marker; exactly one ends every stream."""


StreamEvent = Union[Token, End]


class CancelToken:
    """
    Cooperative cancellation for a streaming call.

    Cancelling closes the bound HTTP response, so a read blocked on the
    socket returns immediately instead of waiting for the next chunk.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._response: Optional[Any] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()
        with self._lock:
            response = self._response
        if response is not None:
            response.close()

    def bind(self, response: Any) -> None:
        with self._lock:
            self._response = response
        if self.cancelled:
            response.close()

    def unbind(self) -> None:
        with self._lock:
            self._response = None


def _extract_delta(payload: Dict[str, Any]) -> str:
    # Anthropic: {"type": "content_block_delta", "delta": {"text": ...}}
    delta = payload.get("delta")
    if isinstance(delta, dict) and isinstance(delta.get("text"), str):
        return delta["text"]
    # OpenAI-compatible: {"choices": [{"delta": {"content": ...}}]}
    choices = payload.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        choice_delta = choices[0].get("delta")
        if isinstance(choice_delta, dict) and isinstance(choice_delta.get("content"), str):
            return choice_delta["content"]
    # Ollama: {"message": {"content": ...}, "done": false}
    message = payload.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    return ""


def decode_stream_line(line: Union[str, bytes]) -> List[StreamEvent]:
    """
    Decode one streamed line into zero or more events.

    Blank, non-JSON and unrecognised lines decode to nothing; a single bad
    line never aborts the stream.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    data = line.strip()
    if data.startswith(SSE_PREFIX):
        data = data[len(SSE_PREFIX):].strip()
    if not data:
        return []
    if data == SSE_DONE:
        return [End()]
    try:
        payload = json.loads(data)
    except ValueError:
        LOGGER.debug("Skipping non-JSON stream line: %.120s", data)
        return []
    if not isinstance(payload, dict):
        return []
    events: List[StreamEvent] = []
    delta = _extract_delta(payload)
    if delta:
        events.append(Token(delta))
    if payload.get("done") is True:
        events.append(End())
    return events
