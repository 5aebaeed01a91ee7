"""
Web search through the DuckDuckGo instant-answer API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from ..core.primitives.tools import ToolExecutionError


LOGGER = logging.getLogger(__name__)

SEARCH_URL = "https://api.duckduckgo.com/"
SEARCH_TIMEOUT = 10.0
NO_RESULT = "[web_search: no result found]"


def web_search(tool_input: str) -> str:
    query = tool_input.strip()
    if not query:
        raise ToolExecutionError("query must not be empty")
    params = {"q": query, "format": "json", "no_html": "1", "skip_disambig": "1"}
    try:
        response = requests.get(SEARCH_URL, params=params, timeout=SEARCH_TIMEOUT)
    except requests.RequestException as exc:
        raise ToolExecutionError(str(exc)) from exc
    try:
        body: Dict[str, Any] = response.json()
    except ValueError:
        LOGGER.info("web_search received a non-JSON body (status %s)", response.status_code)
        return NO_RESULT
    if not isinstance(body, dict):
        return NO_RESULT
    for key in ("AbstractText", "Answer"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return NO_RESULT
