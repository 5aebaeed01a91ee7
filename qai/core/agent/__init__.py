"""
Core agent orchestration components (execution, parsing, prompts).
"""

from .agent import Agent, AgentConfig, AgentRun, AgentRunResult
from .executor import MAX_STEPS, AgentExecutor, ExecutionOutcome, ExecutorConfig
from .parsers import StepParser, parse_steps, recover_tool_call
from .prompts import DEFAULT_SYSTEM_PROMPT, build_react_system_prompt

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentRun",
    "AgentRunResult",
    "MAX_STEPS",
    "AgentExecutor",
    "ExecutionOutcome",
    "ExecutorConfig",
    "StepParser",
    "parse_steps",
    "recover_tool_call",
    "DEFAULT_SYSTEM_PROMPT",
    "build_react_system_prompt",
]
