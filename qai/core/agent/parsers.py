"""
Parser for interpreting LLM responses within the ReAct loop.

The scanner is deliberately permissive substring matching rather than an
XML parser: model output is unreliable and frequently malformed.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from ...tools import BUILTIN_TOOL_NAMES
from ..primitives.steps import Answer, Step, Thought, ToolCall


LOGGER = logging.getLogger(__name__)

THINK_TAG = "think"
TOOL_TAG = "tool"
ANSWER_TAG = "answer"
TAGS = (THINK_TAG, TOOL_TAG, ANSWER_TAG)

_NAME_ATTR = re.compile(r"""\bname\s*=\s*(["'])(.*?)\1""", re.DOTALL)


def _find_open(text: str, tag: str, start: int) -> int:
    """Position of the next `<tag` opening marker at or after `start`, or -1."""
    needle = f"<{tag}"
    index = text.find(needle, start)
    while index != -1:
        after = index + len(needle)
        if after < len(text) and (text[after] == ">" or text[after].isspace()):
            return index
        index = text.find(needle, after)
    return -1


def _earliest_open(text: str, start: int) -> Optional[Tuple[int, str]]:
    earliest: Optional[Tuple[int, str]] = None
    for tag in TAGS:
        index = _find_open(text, tag, start)
        if index != -1 and (earliest is None or index < earliest[0]):
            earliest = (index, tag)
    return earliest


class StepParser:
    """
    Turns one model response into a sequence of steps, plus a plain-text
    fallback for responses that ignore the tag format entirely.
    """

    def __init__(self, tool_names: Optional[Iterable[str]] = None) -> None:
        self.tool_names: Tuple[str, ...] = tuple(tool_names) if tool_names is not None else BUILTIN_TOOL_NAMES

    def parse(self, text: str) -> List[Step]:
        steps: List[Step] = []
        position = 0
        while True:
            found = _earliest_open(text, position)
            if found is None:
                break
            start, tag = found
            head_end = text.find(">", start)
            if head_end == -1:
                break
            closing = f"</{tag}>"
            end = text.find(closing, head_end + 1)
            if end == -1:
                LOGGER.info("Parser stopped at unterminated <%s> marker", tag)
                break
            opening = text[start:head_end + 1]
            body = text[head_end + 1:end]
            position = end + len(closing)

            if tag == THINK_TAG:
                steps.append(Thought(body.strip()))
            elif tag == TOOL_TAG:
                call = self._tool_call(opening, body)
                if call is None:
                    LOGGER.info("Parser found a <tool> marker without a tool name")
                    break
                steps.append(call)
            else:
                # Nothing after an answer is acted on.
                steps.append(Answer(body.strip()))
                break
        return steps

    def _tool_call(self, opening: str, body: str) -> Optional[ToolCall]:
        match = _NAME_ATTR.search(opening)
        if match is not None:
            name, tool_input = match.group(2).strip(), body.strip()
        else:
            first, _, rest = body.strip().partition("\n")
            name, tool_input = first.strip(), rest.strip()
        if not name:
            return None
        return ToolCall(name=name, input=tool_input)

    def recover(self, text: str) -> Optional[ToolCall]:
        """
        Infer a tool call from a response that used no tags at all.

        Tried in order: a first non-blank line naming a known tool (the rest
        is the input), then any line starting with `<tool>:` or `<tool> :`.
        """
        lines = text.splitlines()
        for index, line in enumerate(lines):
            if not line.strip():
                continue
            candidate = line.strip().strip("`").strip()
            if candidate in self.tool_names:
                tool_input = "\n".join(lines[index + 1:]).strip()
                if tool_input.endswith("```"):
                    tool_input = tool_input[:-3].rstrip()
                LOGGER.info("Recovered plain-text tool call from first line: %s", candidate)
                return ToolCall(name=candidate, input=tool_input)
            break

        for line in lines:
            stripped = line.strip()
            for name in self.tool_names:
                for prefix in (f"{name}:", f"{name} :"):
                    if stripped.startswith(prefix):
                        LOGGER.info("Recovered plain-text tool call from prefix: %s", name)
                        return ToolCall(name=name, input=stripped[len(prefix):].strip())
        return None


def parse_steps(text: str) -> List[Step]:
    return StepParser().parse(text)


def recover_tool_call(text: str, tool_names: Optional[Sequence[str]] = None) -> Optional[ToolCall]:
    return StepParser(tool_names).recover(text)
