"""
Definitions of the steps recovered from a model response in the ReAct loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Thought:
    """
    Private reasoning emitted by the model. Displayed, never acted on.
    """

    text: str = ""


@dataclass(frozen=True)
class ToolCall:
    """
    Indicates that the agent should execute a tool invocation.

    `input` is opaque to the loop; each tool parses its own grammar out of it.
    """

    name: str
    input: str = ""


@dataclass(frozen=True)
class Answer:
    """
    Signals that the model has produced its final answer for the task.
    """

    text: str


Step = Union[Thought, ToolCall, Answer]
