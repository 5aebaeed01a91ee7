"""
High-level exports for the qai ReAct agent.

This package exposes the primary Agent interface alongside the step types,
tool registry and provider clients that can be used to extend or customize
agent behaviour.
"""

from .core.agent import (
    MAX_STEPS,
    Agent,
    AgentConfig,
    AgentRun,
    AgentRunResult,
    StepParser,
    parse_steps,
    recover_tool_call,
)
from .core.primitives import (
    Answer,
    ChatMessage,
    MessageRole,
    Step,
    Thought,
    Tool,
    ToolCall,
    ToolRegistry,
)
from .llm import CancelToken, End, LLMClient, LLMError, Token, create_chat_completion_client
from .tools import BUILTIN_TOOL_NAMES, default_registry

__all__ = [
    "MAX_STEPS",
    "Agent",
    "AgentConfig",
    "AgentRun",
    "AgentRunResult",
    "StepParser",
    "parse_steps",
    "recover_tool_call",
    "Answer",
    "ChatMessage",
    "MessageRole",
    "Step",
    "Thought",
    "Tool",
    "ToolCall",
    "ToolRegistry",
    "CancelToken",
    "End",
    "LLMClient",
    "LLMError",
    "Token",
    "create_chat_completion_client",
    "BUILTIN_TOOL_NAMES",
    "default_registry",
]
