"""
Simple in-memory storage for agent conversation state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .messages import ChatMessage, HistoryItem, MessageRole, coerce_history, user_message


@dataclass
class ConversationMemory:
    """
    Append-only record of the conversation between the user, the agent and
    the language model, including tool observations.
    """

    messages: List[ChatMessage] = field(default_factory=list)

    @classmethod
    def seed(cls, prior: Iterable[HistoryItem], task: str) -> "ConversationMemory":
        """
        Build the working history for a run: prior turns, minus any user turn
        that repeats the task verbatim, followed by the task itself.
        """
        kept = [
            message
            for message in coerce_history(prior)
            if not (message.role is MessageRole.USER and message.content == task)
        ]
        memory = cls(kept)
        memory.append(user_message(task))
        return memory

    def append(self, message: ChatMessage) -> None:
        self.messages.append(message)

    def snapshot(self) -> List[ChatMessage]:
        """Return a shallow copy so callers cannot mutate the live history."""
        return list(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
