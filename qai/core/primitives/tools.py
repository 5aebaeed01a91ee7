"""
Utilities for registering and invoking tools in the agent loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List


LOGGER = logging.getLogger(__name__)

ANSWER_TOOL = "answer"
ANSWER_SENTINEL = "__AGENT_ANSWER__:"


class ToolExecutionError(RuntimeError):
    """Raised by a tool when its input is unusable or the operation fails."""


ToolCallable = Callable[[str], str]


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    func: ToolCallable

    def __call__(self, tool_input: str) -> str:
        return self.func(tool_input)


def _answer(tool_input: str) -> str:
    return f"{ANSWER_SENTINEL}{tool_input}"


# Some models wrap their final answer in <tool name="answer"> instead of <answer>.
ANSWER_TOOL_SPEC = Tool(
    name=ANSWER_TOOL,
    description="Deliver the final answer (prefer the <answer> tag).",
    func=_answer,
)


def is_sentinel_answer(observation: str) -> bool:
    return observation.startswith(ANSWER_SENTINEL)


def strip_sentinel(observation: str) -> str:
    return observation[len(ANSWER_SENTINEL):].strip()


class ToolRegistry:
    """In-memory registry responsible for resolving and dispatching tools."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: Dict[str, Tool] = {}
        self.update(tools)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool named '{tool.name}' already registered.")
        self._tools[tool.name] = tool

    def update(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError as exc:
            raise KeyError(f"Unknown tool '{name}'.") from exc

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def dispatch(self, name: str, tool_input: str) -> str:
        """
        Run tool `name` against `tool_input` and return the observation.

        Never raises: unknown tools and tool failures come back as bracketed
        strings so the model can see and correct its own mistakes.
        """
        tool = self._tools.get(name)
        if tool is None:
            LOGGER.info("Model requested unknown tool: %s", name)
            return f"[unknown tool: {name}]"
        try:
            return tool(tool_input)
        except ToolExecutionError as exc:
            return f"[{name} error: {exc}]"
        except Exception as exc:
            LOGGER.warning("Tool '%s' failed", name, exc_info=True)
            return f"[{name} error: {exc}]"

    def describe(self) -> str:
        """Return a prompt-friendly description of registered tools."""
        return "\n".join(f"- {tool.name}: {tool.description}" for tool in self._tools.values())
