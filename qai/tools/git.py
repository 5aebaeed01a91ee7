"""
Version-control tools. Each maps to one fixed git invocation.
"""

from __future__ import annotations

import shlex
from typing import List, Optional

from ..core.primitives.tools import ToolExecutionError
from .shell import run_command


DEFAULT_LOG_ENTRIES = 10


def _git(args: List[str], workdir: Optional[str] = None) -> str:
    return run_command(["git", *args], cwd=workdir or None)


def git_status(tool_input: str) -> str:
    """Input: optional working directory."""
    return _git(["status", "--short"], tool_input.strip())


def git_diff(tool_input: str) -> str:
    """Input: optional path or ref."""
    target = tool_input.strip()
    return _git(["diff", target] if target else ["diff"])


def git_add(tool_input: str) -> str:
    paths = shlex.split(tool_input.strip())
    if not paths:
        raise ToolExecutionError("provide path(s) to stage, e.g. '.' or 'src/main.py'")
    return _git(["add", *paths])


def git_commit(tool_input: str) -> str:
    message = tool_input.strip()
    if not message:
        raise ToolExecutionError("commit message must not be empty")
    return _git(["commit", "-m", message])


def git_log(tool_input: str) -> str:
    try:
        count = int(tool_input.strip())
    except ValueError:
        count = DEFAULT_LOG_ENTRIES
    if count <= 0:
        count = DEFAULT_LOG_ENTRIES
    return _git(["log", "--oneline", f"-{count}"])
