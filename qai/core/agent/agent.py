"""
High-level Agent interface that coordinates tool execution and LLM interaction.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Sequence

from ...llm import LLMClient, create_chat_completion_client
from ...llm.base import DEFAULT_MAX_TOKENS, DEFAULT_TIMEOUT
from ...tools import default_registry
from ..primitives.memory import ConversationMemory
from ..primitives.messages import ChatMessage, HistoryItem
from ..primitives.tools import ToolRegistry
from .executor import MAX_STEPS, AgentExecutor, ExecutorConfig
from .parsers import StepParser
from .prompts import DEFAULT_SYSTEM_PROMPT


@dataclass
class AgentRunResult:
    task: str
    final_answer: str
    status: str
    steps: int
    memory: Sequence[ChatMessage]


@dataclass(frozen=True)
class AgentConfig:
    provider: str = "openai"
    model: str = ""
    api_token: str = ""
    custom_url: str = ""
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_steps: int = MAX_STEPS
    count_stalls: bool = True
    timeout: float = DEFAULT_TIMEOUT
    max_tokens: int = DEFAULT_MAX_TOKENS

    def executor_config(self) -> ExecutorConfig:
        return ExecutorConfig(
            max_steps=self.max_steps,
            system_prompt=self.system_prompt,
            count_stalls=self.count_stalls,
        )


class AgentRun:
    """Handle to an agent run executing on a background thread."""

    def __init__(self, channel: "queue.Queue[Optional[str]]") -> None:
        self.channel = channel
        self.result: Optional[AgentRunResult] = None
        self.thread: Optional[threading.Thread] = None

    def iter_output(self, timeout: Optional[float] = None) -> Iterator[str]:
        """Yield display lines until the run signals completion."""
        while True:
            item = self.channel.get(timeout=timeout)
            if item is None:
                return
            yield item

    def join(self, timeout: Optional[float] = None) -> Optional[AgentRunResult]:
        if self.thread is not None:
            self.thread.join(timeout)
        return self.result


class Agent:
    def __init__(
        self,
        config: AgentConfig,
        *,
        llm: Optional[LLMClient] = None,
        tools: Optional[ToolRegistry] = None,
        parser: Optional[StepParser] = None,
    ) -> None:
        self.config = config
        self.llm = llm or create_chat_completion_client(
            config.provider,
            config.model,
            api_key=config.api_token,
            base_url=config.custom_url,
            timeout=config.timeout,
            max_output_tokens=config.max_tokens,
        )
        self.tools = tools if tools is not None else default_registry()
        self.executor = AgentExecutor(
            self.llm,
            self.tools,
            parser=parser,
            config=config.executor_config(),
        )
        self._logger = logging.getLogger(__name__)

    def run(
        self,
        task: str,
        prior_history: Iterable[HistoryItem] = (),
        *,
        channel: Optional[Any] = None,
    ) -> AgentRunResult:
        """
        Run the ReAct loop for `task` on the calling thread.

        `prior_history` holds earlier `(role, content)` turns of the session;
        a user turn repeating `task` verbatim is dropped before the task is
        appended.
        """
        try:
            memory = ConversationMemory.seed(prior_history, task)
        except Exception:
            if channel is not None:
                channel.put(None)
            raise
        self._logger.info(
            "\n%s\n[MEMORY BEFORE EXECUTION]\n%s\n%s",
            "-" * 80,
            self._format_memory_snapshot(memory.messages),
            "-" * 80,
        )
        outcome = self.executor.run(task, memory=memory, channel=channel)
        return AgentRunResult(
            task=task,
            final_answer=outcome.final_answer,
            status=outcome.status,
            steps=outcome.steps,
            memory=outcome.history,
        )

    def start(
        self,
        task: str,
        prior_history: Iterable[HistoryItem] = (),
        *,
        channel: "Optional[queue.Queue[Optional[str]]]" = None,
    ) -> AgentRun:
        """Run on a daemon thread so tool and network waits never block the caller."""
        handle = AgentRun(channel if channel is not None else queue.Queue())
        history = list(prior_history)

        def _target() -> None:
            handle.result = self.run(task, history, channel=handle.channel)

        handle.thread = threading.Thread(target=_target, name="qai-agent-run", daemon=True)
        handle.thread.start()
        return handle

    def _format_memory_snapshot(self, messages: Sequence[ChatMessage]) -> str:
        if not messages:
            return "(memory is empty)"
        lines = []
        for index, message in enumerate(messages, start=1):
            snippet = message.content.strip().replace("\n", " ")
            if len(snippet) > 160:
                snippet = f"{snippet[:157]}..."
            lines.append(f"{index:02d}. {message.role.value.upper()}: {snippet}")
        return "\n".join(lines)
