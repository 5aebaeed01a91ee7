"""
Persistence of the API token in the user's config directory.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path


LOGGER = logging.getLogger(__name__)

APP_DIR = "qai"
CONFIG_FILE = "config.toml"


def config_dir() -> Path:
    """Return the config directory, respecting XDG_CONFIG_HOME."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR
    return Path.home() / ".config" / APP_DIR


def config_path() -> Path:
    return config_dir() / CONFIG_FILE


def load_api_token() -> str:
    """Saved token, or `""` when there is no usable config file."""
    path = config_path()
    if not path.is_file():
        return ""
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        LOGGER.warning("Ignoring unreadable config %s: %s", path, exc)
        return ""
    token = data.get("api_token", "")
    return token if isinstance(token, str) else ""


def save_api_token(token: str) -> Path:
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    escaped = token.replace("\\", "\\\\").replace('"', '\\"')
    path.write_text(f'api_token = "{escaped}"\n', encoding="utf-8")
    return path
