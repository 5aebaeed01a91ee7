"""
Process-backed tools: arbitrary shell commands and recursive text search.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from ..core.primitives.tools import ToolExecutionError


LOGGER = logging.getLogger(__name__)

COMMAND_TIMEOUT = 120.0
NO_OUTPUT = "(no output)"
MAX_GREP_LINES = 200
SKIP_DIRS = {".git"}


def run_command(
    command: Union[str, Sequence[str]],
    *,
    shell: bool = False,
    cwd: Optional[str] = None,
    timeout: float = COMMAND_TIMEOUT,
) -> str:
    """
    Run a command and return stdout followed by stderr, trimmed.

    Silence is reported as `(no output)` so the model never mistakes it for
    a failure.
    """
    try:
        completed = subprocess.run(
            command,
            shell=shell,
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise ToolExecutionError(f"command timed out after {exc.timeout:g}s") from exc
    except OSError as exc:
        raise ToolExecutionError(str(exc)) from exc
    stdout = completed.stdout.decode("utf-8", errors="replace")
    stderr = completed.stderr.decode("utf-8", errors="replace")
    LOGGER.debug("Command %r exited with %d", command, completed.returncode)
    combined = f"{stdout}{stderr}".strip()
    return combined or NO_OUTPUT


def shell(tool_input: str) -> str:
    command = tool_input.strip()
    if not command:
        raise ToolExecutionError("command must not be empty")
    return run_command(command, shell=True)


def _iter_files(root: Path, glob: str) -> Iterator[Path]:
    if root.is_file():
        yield root
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for filename in sorted(filenames):
            if glob and not fnmatch.fnmatch(filename, glob):
                continue
            yield Path(dirpath) / filename


def _read_searchable(path: Path) -> Optional[str]:
    try:
        data = path.read_bytes()
    except OSError:
        return None
    if b"\x00" in data[:8192]:
        return None
    return data.decode("utf-8", errors="replace")


def grep_search(tool_input: str) -> str:
    """
    Input: `<pattern>\\n[path]\\n[glob]`. Path defaults to the working
    directory; glob filters file names.
    """
    parts = tool_input.lstrip().split("\n", 2)
    pattern = parts[0].strip()
    path = parts[1].strip() if len(parts) > 1 else ""
    glob = parts[2].strip() if len(parts) > 2 else ""
    if not pattern:
        raise ToolExecutionError("pattern must not be empty")
    path = path or "."
    root = Path(path)
    if not root.exists():
        raise ToolExecutionError(f"{path}: no such file or directory")
    try:
        regex = re.compile(pattern)
    except re.error:
        regex = re.compile(re.escape(pattern))

    matches: List[str] = []
    for file_path in _iter_files(root, glob):
        text = _read_searchable(file_path)
        if text is None:
            continue
        for lineno, line in enumerate(text.splitlines(), 1):
            if regex.search(line):
                matches.append(f"{file_path}:{lineno}:{line}")
                if len(matches) > MAX_GREP_LINES:
                    kept = "\n".join(matches[:MAX_GREP_LINES])
                    return f"{kept}\n[... output truncated to {MAX_GREP_LINES} lines]"
    if not matches:
        return "[grep_search: no matches found]"
    return "\n".join(matches)
