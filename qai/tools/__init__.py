"""
Builtin tools available to the agent.

`BUILTIN_TOOLS` is the single source of truth for tool names: the dispatch
table, the prompt's tool list and the plain-text recovery heuristic all read
from it.
"""

from typing import Tuple

from ..core.primitives.tools import ANSWER_TOOL_SPEC, Tool, ToolRegistry
from .filesystem import edit_file, read_file, write_file
from .git import git_add, git_commit, git_diff, git_log, git_status
from .shell import grep_search, shell
from .web import web_search


BUILTIN_TOOLS: Tuple[Tool, ...] = (
    Tool("read_file", "Read a file. Input: the path.", read_file),
    Tool(
        "write_file",
        "Create or overwrite a file. Input: the path on the first line, the full content after it.",
        write_file,
    ),
    Tool(
        "edit_file",
        "Replace the first occurrence of a block in a file. "
        "Input: path, then '<<<', the search text, '===', the replacement, '>>>' (each on its own line).",
        edit_file,
    ),
    Tool("shell", "Run one shell command line. Input: the command.", shell),
    Tool(
        "grep_search",
        "Regex search in files. Input: pattern, optional path on line 2, optional file glob on line 3.",
        grep_search,
    ),
    Tool("git_status", "Show `git status --short`. Input: optional repository directory.", git_status),
    Tool("git_diff", "Show `git diff`. Input: optional path or ref.", git_diff),
    Tool("git_add", "Stage files. Input: space-separated paths (or '.').", git_add),
    Tool("git_commit", "Commit staged changes. Input: the commit message.", git_commit),
    Tool("git_log", "Show recent commits. Input: optional number of entries (default 10).", git_log),
    Tool("web_search", "Search the web for a short factual answer. Input: the query.", web_search),
    ANSWER_TOOL_SPEC,
)

BUILTIN_TOOL_NAMES: Tuple[str, ...] = tuple(tool.name for tool in BUILTIN_TOOLS)


def default_registry() -> ToolRegistry:
    return ToolRegistry(BUILTIN_TOOLS)


__all__ = [
    "BUILTIN_TOOLS",
    "BUILTIN_TOOL_NAMES",
    "default_registry",
    "edit_file",
    "git_add",
    "git_commit",
    "git_diff",
    "git_log",
    "git_status",
    "grep_search",
    "read_file",
    "shell",
    "web_search",
    "write_file",
]
