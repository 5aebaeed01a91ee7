"""
Core primitives that compose the agent pipeline.
"""

from .primitives import (
    Answer,
    ChatMessage,
    ConversationMemory,
    MessageRole,
    Step,
    Thought,
    Tool,
    ToolCall,
    ToolExecutionError,
    ToolRegistry,
)

__all__ = [
    "Answer",
    "ChatMessage",
    "ConversationMemory",
    "MessageRole",
    "Step",
    "Thought",
    "Tool",
    "ToolCall",
    "ToolExecutionError",
    "ToolRegistry",
]
