"""
Configuration loader for vc_release_notes.

Settings are read from an optional JSON file named ``config.json`` in the
``~/.git_release/`` directory. Missing keys fall back to defaults and the
``GITHUB_TOKEN`` environment variable overrides the token from the file.

If the configuration file exists but is malformed or has fields of the
wrong type, a :class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings or logging errors in
# environments where the root logger may be closed.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILENAME = "config.json"
TOKEN_ENV_VAR = "GITHUB_TOKEN"

DEFAULTS: Dict[str, Any] = {
    "remote": "origin",
    "api_url": "https://api.github.com",
    "request_timeout": 30,
    "github_token": None,
}


class ConfigError(Exception):
    """Raised when the configuration file is invalid."""

    pass


def _get_config_directory() -> Path:
    """Return the directory holding the git-release configuration."""
    return Path.home() / ".git_release"


def _validate(data: Dict[str, Any]) -> None:
    for key in ("remote", "api_url"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    if "request_timeout" in data and (
        isinstance(data["request_timeout"], bool)
        or not isinstance(data["request_timeout"], (int, float))
    ):
        raise ConfigError("'request_timeout' must be a number")
    if data.get("github_token") is not None and not isinstance(data["github_token"], str):
        raise ConfigError("'github_token' must be a string")


def load_config() -> Dict[str, Any]:
    """Load the configuration and return it merged over the defaults.

    Returns:
        A dictionary with keys:
        - remote (str): Remote used to find the GitHub repository
        - api_url (str): Base URL of the GitHub API
        - request_timeout (int|float): Request timeout in seconds
        - github_token (str|None): Token used when publishing

    Raises:
        ConfigError: If the configuration file is malformed or invalid.
    """
    config: Dict[str, Any] = dict(DEFAULTS)
    config_path = _get_config_directory() / CONFIG_FILENAME

    if config_path.exists():
        try:
            content = config_path.read_text(encoding="utf-8")
            data = json.loads(content)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read or parse configuration file: %s", exc)
            raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path.name} must contain a JSON object")
        _validate(data)
        unknown = sorted(set(data) - set(DEFAULTS))
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
        config.update({key: value for key, value in data.items() if key in DEFAULTS})
        logger.debug("Loaded configuration from: %s", config_path)
    else:
        logger.debug("No configuration file at %s, using defaults", config_path)

    token = os.environ.get(TOKEN_ENV_VAR)
    if token:
        config["github_token"] = token
    return config
