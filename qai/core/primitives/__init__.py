"""
Foundational data structures shared across the framework.
"""

from .memory import ConversationMemory
from .messages import (
    ChatMessage,
    HistoryItem,
    MessageRole,
    assistant_message,
    coerce_history,
    coerce_messages,
    user_message,
)
from .steps import Answer, Step, Thought, ToolCall
from .tools import (
    ANSWER_SENTINEL,
    ANSWER_TOOL,
    ANSWER_TOOL_SPEC,
    Tool,
    ToolCallable,
    ToolExecutionError,
    ToolRegistry,
    is_sentinel_answer,
    strip_sentinel,
)

__all__ = [
    "Answer",
    "Step",
    "Thought",
    "ToolCall",
    "ConversationMemory",
    "ChatMessage",
    "HistoryItem",
    "MessageRole",
    "assistant_message",
    "coerce_history",
    "coerce_messages",
    "user_message",
    "ANSWER_SENTINEL",
    "ANSWER_TOOL",
    "ANSWER_TOOL_SPEC",
    "Tool",
    "ToolCallable",
    "ToolExecutionError",
    "ToolRegistry",
    "is_sentinel_answer",
    "strip_sentinel",
]
