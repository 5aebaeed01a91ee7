"""
File tools: read, write and search/replace edit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from ..core.primitives.tools import ToolExecutionError


LOGGER = logging.getLogger(__name__)

EDIT_OPEN = "<<<\n"
EDIT_SEPARATOR = "\n===\n"
EDIT_CLOSE = ">>>"


def _read_text(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_text(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def read_file(tool_input: str) -> str:
    """Input: a path. Returns the raw file contents."""
    path = tool_input.strip()
    if not path:
        raise ToolExecutionError("path must not be empty")
    try:
        return _read_text(Path(path))
    except (OSError, UnicodeDecodeError) as exc:
        raise ToolExecutionError(str(exc)) from exc


def write_file(tool_input: str) -> str:
    """Input: `<path>\\n<content>`. Parent directories are created as needed."""
    raw = tool_input.lstrip()
    if "\n" not in raw:
        raise ToolExecutionError("input must be '<path>\\n<content>'")
    first, content = raw.split("\n", 1)
    target = first.strip()
    if not target:
        raise ToolExecutionError("path must not be empty")
    path = Path(target)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_text(path, content)
    except OSError as exc:
        raise ToolExecutionError(str(exc)) from exc
    size = len(content.encode("utf-8"))
    LOGGER.debug("write_file wrote %d bytes to %s", size, path)
    return f"[write_file: wrote {size} bytes to {target}]"


def parse_edit(tool_input: str) -> Tuple[str, str, str]:
    """
    Split `<path>\\n<<<\\n<search>\\n===\\n<replacement>\\n>>>` into its parts.
    """
    raw = tool_input.lstrip()
    first, _, rest = raw.partition("\n")
    path = first.strip()
    if not rest.startswith(EDIT_OPEN):
        raise ToolExecutionError("input must start with path then '<<<'")
    body = rest[len(EDIT_OPEN):]
    search, found, after = body.partition(EDIT_SEPARATOR)
    if not found:
        raise ToolExecutionError("missing '===' separator")
    if after.endswith("\n" + EDIT_CLOSE):
        replacement = after[: -len(EDIT_CLOSE) - 1]
    elif after.endswith(EDIT_CLOSE):
        replacement = after[: -len(EDIT_CLOSE)]
    else:
        replacement = after
    return path, search, replacement


def edit_file(tool_input: str) -> str:
    """Replace the first occurrence of the search block in the file."""
    path, search, replacement = parse_edit(tool_input)
    if not search:
        raise ToolExecutionError("search text must not be empty")
    try:
        original = _read_text(Path(path))
    except (OSError, UnicodeDecodeError) as exc:
        raise ToolExecutionError(f"reading {path}: {exc}") from exc
    if search not in original:
        raise ToolExecutionError(f"search string not found in {path}")
    try:
        _write_text(Path(path), original.replace(search, replacement, 1))
    except OSError as exc:
        raise ToolExecutionError(f"writing {path}: {exc}") from exc
    return f"[edit_file: applied edit to {path}]"
