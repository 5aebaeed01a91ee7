"""
Prompt templates and display strings for the ReAct agent loop.
"""

from __future__ import annotations

from textwrap import dedent


DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant that can work on the user's machine."

REACT_INSTRUCTIONS = dedent(
    """
    You are operating in ReAct mode. For each step you MUST output one or more of:
    <think>your reasoning</think>
    <tool name="TOOL_NAME">tool input</tool>
    <answer>final answer to the user</answer>
    Do NOT output plain text outside these tags. After a <tool> call, stop and wait:
    the result comes back to you inside <observation>...</observation>.
    Use <answer> only when you are done; nothing after it is read.

    Available tools:
    {tools}

    Example, reading a file:
    <think>I need to see the configuration first.</think>
    <tool name="read_file">config/settings.toml</tool>

    Example, writing a file (path on the first line, content after it):
    <tool name="write_file">notes/todo.md
    - ship the release</tool>

    Example, editing a file:
    <tool name="edit_file">src/app.py
    <<<
    DEBUG = True
    ===
    DEBUG = False
    >>></tool>

    Example, finishing:
    <answer>The tests pass and DEBUG is now disabled.</answer>
    """
).strip()

STALL_NUDGE = (
    "You only produced a <think> block. Your next reply MUST contain either a "
    '<tool name="...">...</tool> call or a final <answer>...</answer>.'
)

THOUGHT_TEMPLATE = "💭 **Thought:** {text}\n\n"
TOOL_TEMPLATE = "🔧 **Tool:** `{name}({input})`\n"
OBSERVATION_TEMPLATE = "👁 **Observation:** {text}\n\n"
ANSWER_TEMPLATE = "✅ **Answer:**\n{text}"
MAX_STEPS_NOTICE = "\n⚠️ **Max steps reached.** Stopping agent loop.\n"


def build_react_system_prompt(system_prompt: str, *, tool_descriptions: str) -> str:
    tool_section = tool_descriptions.strip() if tool_descriptions else "No tools available."
    instructions = REACT_INSTRUCTIONS.format(tools=tool_section)
    base = system_prompt.strip()
    return f"{base}\n\n{instructions}" if base else instructions


def wrap_observation(observation: str) -> str:
    return f"<observation>{observation}</observation>"


def llm_error_answer(error: object) -> str:
    """Synthetic response used when the provider call fails."""
    return f"<answer>[LLM error: {error}]</answer>"
