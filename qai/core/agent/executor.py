"""
Execution loop that drives the ReAct agent using an LLM and registered tools.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ...llm import LLMClient
from ..primitives.memory import ConversationMemory
from ..primitives.messages import ChatMessage, assistant_message, user_message
from ..primitives.steps import Answer, Step, Thought, ToolCall
from ..primitives.tools import ToolRegistry, is_sentinel_answer, strip_sentinel
from .parsers import StepParser
from .prompts import (
    ANSWER_TEMPLATE,
    DEFAULT_SYSTEM_PROMPT,
    MAX_STEPS_NOTICE,
    OBSERVATION_TEMPLATE,
    STALL_NUDGE,
    THOUGHT_TEMPLATE,
    TOOL_TEMPLATE,
    build_react_system_prompt,
    llm_error_answer,
    wrap_observation,
)


MAX_STEPS = 10

STATUS_ANSWERED = "answered"
STATUS_PASSTHROUGH = "passthrough"
STATUS_EXHAUSTED = "exhausted"


@dataclass
class ExecutorConfig:
    max_steps: int = MAX_STEPS
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    # When False, <think>-only replies draw on a separate allowance of
    # `max_steps` instead of the step budget.
    count_stalls: bool = True


@dataclass
class ExecutionOutcome:
    final_answer: str
    status: str
    steps: int
    history: List[ChatMessage] = field(default_factory=list)


class AgentExecutor:
    def __init__(
        self,
        llm: LLMClient,
        tools: ToolRegistry,
        *,
        parser: Optional[StepParser] = None,
        config: Optional[ExecutorConfig] = None,
    ) -> None:
        self.llm = llm
        self.tools = tools
        self.parser = parser or StepParser(tools.names())
        self.config = config or ExecutorConfig()
        self._logger = logging.getLogger(__name__)

    def run(
        self,
        task: str,
        *,
        memory: ConversationMemory,
        channel: Optional[Any] = None,
    ) -> ExecutionOutcome:
        """
        Drive the loop until an answer, a passthrough reply or an exhausted
        budget. `channel` receives display lines and then `None`, exactly
        once, on every exit path.
        """
        try:
            return self._loop(task, memory, channel)
        finally:
            self._emit(channel, None)

    def _loop(self, task: str, memory: ConversationMemory, channel: Optional[Any]) -> ExecutionOutcome:
        system = build_react_system_prompt(self.config.system_prompt, tool_descriptions=self.tools.describe())
        self._logger.info(
            "\n%s\n[EXECUTION START]\nTask: %s\nMax steps: %d\n%s",
            "=" * 80,
            task,
            self.config.max_steps,
            "=" * 80,
        )

        steps_taken = 0
        stalls = 0
        while steps_taken < self.config.max_steps:
            steps_taken += 1
            response = self._request(system, memory, steps_taken)
            steps = self.parser.parse(response)
            if not steps:
                recovered = self.parser.recover(response)
                if recovered is None:
                    # Untagged output that names no tool is the final answer.
                    self._logger.info("Treating untagged response as the final answer")
                    self._emit(channel, response)
                    memory.append(assistant_message(response))
                    return self._outcome(response, STATUS_PASSTHROUGH, steps_taken, memory)
                steps = [recovered]

            memory.append(assistant_message(response))

            if not any(isinstance(step, (ToolCall, Answer)) for step in steps):
                self._handle_stall(steps, memory, channel)
                if not self.config.count_stalls and stalls < self.config.max_steps:
                    stalls += 1
                    steps_taken -= 1
                continue

            answer = self._execute_steps(steps, memory, channel)
            if answer is not None:
                self._logger.info(
                    "\n%s\n[STEP %d] FINAL ANSWER RECEIVED\n%s\n%s",
                    "=" * 80,
                    steps_taken,
                    answer,
                    "=" * 80,
                )
                return self._outcome(answer, STATUS_ANSWERED, steps_taken, memory)

        self._logger.info("Step budget of %d exhausted without an answer", self.config.max_steps)
        self._emit(channel, MAX_STEPS_NOTICE)
        return self._outcome("", STATUS_EXHAUSTED, steps_taken, memory)

    def _request(self, system: str, memory: ConversationMemory, step: int) -> str:
        try:
            response = self.llm.call(system, memory.snapshot())
        except Exception as exc:
            self._logger.warning("LLM call failed at step %d: %s", step, exc)
            response = llm_error_answer(exc)
        self._logger.info(
            "\n%s\n[STEP %d] RAW LLM RESPONSE\n%s\n%s",
            "-" * 80,
            step,
            response.strip(),
            "-" * 80,
        )
        return response

    def _handle_stall(self, steps: Sequence[Step], memory: ConversationMemory, channel: Optional[Any]) -> None:
        for step in steps:
            if isinstance(step, Thought):
                self._emit(channel, THOUGHT_TEMPLATE.format(text=step.text))
        self._logger.info("Response held only thoughts; nudging the model")
        memory.append(user_message(STALL_NUDGE))

    def _execute_steps(
        self,
        steps: Sequence[Step],
        memory: ConversationMemory,
        channel: Optional[Any],
    ) -> Optional[str]:
        """Act on steps in order; return the answer text if one is reached."""
        for step in steps:
            if isinstance(step, Thought):
                self._emit(channel, THOUGHT_TEMPLATE.format(text=step.text))
            elif isinstance(step, ToolCall):
                self._emit(channel, TOOL_TEMPLATE.format(name=step.name, input=step.input))
                observation = self.tools.dispatch(step.name, step.input)
                if is_sentinel_answer(observation):
                    answer = strip_sentinel(observation)
                    self._emit(channel, ANSWER_TEMPLATE.format(text=answer))
                    return answer
                self._logger.info(
                    "\n%s\n[TOOL RESULT] %s(%s)\n%s\n%s",
                    "-" * 80,
                    step.name,
                    step.input,
                    observation.strip(),
                    "-" * 80,
                )
                self._emit(channel, OBSERVATION_TEMPLATE.format(text=observation))
                memory.append(user_message(wrap_observation(observation)))
            elif isinstance(step, Answer):
                self._emit(channel, ANSWER_TEMPLATE.format(text=step.text))
                return step.text
        return None

    def _emit(self, channel: Optional[Any], item: Optional[str]) -> None:
        if channel is None:
            return
        if item is None:
            channel.put(None)
            return
        try:
            channel.put_nowait(item)
        except queue.Full:
            self._logger.debug("Observer channel full; dropping %r", item)

    def _outcome(self, answer: str, status: str, steps: int, memory: ConversationMemory) -> ExecutionOutcome:
        return ExecutionOutcome(final_answer=answer, status=status, steps=steps, history=memory.snapshot())
