"""
Direct chat mode: stream one model reply into an observer channel.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from .core.primitives.messages import HistoryItem
from .llm import CancelToken, LLMClient, LLMError, Token


LOGGER = logging.getLogger(__name__)


def stream_reply(
    client: LLMClient,
    system: str,
    history: Iterable[HistoryItem],
    channel: Any,
    cancel: Optional[CancelToken] = None,
) -> str:
    """
    Forward each streamed token into `channel`, then `None` exactly once.

    Failures are delivered as an inline `[error: ...]` line rather than
    raised. Returns the text received before the stream ended.
    """
    parts: List[str] = []
    try:
        for event in client.stream(system, history, cancel):
            if isinstance(event, Token):
                parts.append(event.text)
                _offer(channel, event.text)
    except LLMError as exc:
        LOGGER.warning("Chat stream failed: %s", exc)
        _offer(channel, f"[error: {exc}]")
    finally:
        channel.put(None)
    return "".join(parts)


def _offer(channel: Any, text: str) -> None:
    try:
        channel.put_nowait(text)
    except queue.Full:
        LOGGER.debug("Chat channel full; dropping %d chars", len(text))


@dataclass
class ChatRun:
    """Handle to a reply streaming on a background thread."""

    channel: "queue.Queue[Optional[str]]"
    cancel: CancelToken = field(default_factory=CancelToken)
    thread: Optional[threading.Thread] = None
    text: str = ""

    def stop(self) -> None:
        self.cancel.cancel()

    def join(self, timeout: Optional[float] = None) -> str:
        if self.thread is not None:
            self.thread.join(timeout)
        return self.text


def start_reply(client: LLMClient, system: str, history: Iterable[HistoryItem]) -> ChatRun:
    run = ChatRun(channel=queue.Queue())
    turns = list(history)

    def _target() -> None:
        run.text = stream_reply(client, system, turns, run.channel, run.cancel)

    run.thread = threading.Thread(target=_target, name="qai-chat-stream", daemon=True)
    run.thread.start()
    return run
