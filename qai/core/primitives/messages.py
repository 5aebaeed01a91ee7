"""
Core message primitives shared across the agent pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union


LOGGER = logging.getLogger(__name__)


class MessageRole(str, Enum):
    """Canonical chat roles accepted by the framework."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """
    Minimal representation of a chat message.

    The structure mirrors the `{"role", "content"}` shape every supported
    provider accepts and is easily serializable to JSON.
    """

    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""
        return {"role": self.role.value, "content": self.content}


HistoryItem = Union[ChatMessage, Tuple[str, str], Mapping[str, Any]]


def user_message(content: str) -> ChatMessage:
    return ChatMessage(role=MessageRole.USER, content=content)


def assistant_message(content: str) -> ChatMessage:
    return ChatMessage(role=MessageRole.ASSISTANT, content=content)


def coerce_messages(messages: Sequence[ChatMessage]) -> List[Dict[str, Any]]:
    """Convert a list of message objects into dictionaries."""
    return [message.to_dict() for message in messages]


def coerce_history(items: Iterable[HistoryItem]) -> List[ChatMessage]:
    """
    Normalise caller-supplied turns into `ChatMessage` objects.

    Accepts `ChatMessage` instances, `(role, content)` pairs and
    `{"role": ..., "content": ...}` mappings. Only user and assistant turns
    are kept; anything else (system or tool roles, malformed entries) is
    skipped with a warning.
    """
    messages: List[ChatMessage] = []
    for item in items:
        if isinstance(item, ChatMessage):
            messages.append(item)
            continue
        if isinstance(item, Mapping):
            role, content = item.get("role"), item.get("content")
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            role, content = item
        else:
            LOGGER.warning("Skipping malformed history entry: %r", item)
            continue
        try:
            message_role = MessageRole(role)
        except ValueError:
            LOGGER.warning("Skipping history turn with unsupported role %r", role)
            continue
        messages.append(ChatMessage(role=message_role, content=str(content or "")))
    return messages
