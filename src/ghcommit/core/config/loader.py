"""
Configuration loading.

Layers, lowest to highest precedence:
    hardcoded defaults
    user config      ~/.config/gh-commit/config.json (XDG aware)
    project config   .gh-commit.json in the working copy
    environment      GH_COMMIT_* variables

Explicit command-line options are applied on top of the result by the CLI.
"""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import GhCommitConfig

APP_NAME = "gh-commit"
PROJECT_CONFIG_NAME = f".{APP_NAME}.json"

_config_cache: GhCommitConfig | None = None


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise ValueError(f"must be >= 0, got {parsed}")
    return parsed


def _boolean(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no", "off", "")


# env var -> (key path into the config dict, parser)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any]]] = {
    "GH_COMMIT_BRANCH": (("branch",), str),
    "GH_COMMIT_MESSAGE": (("message",), str),
    "GH_COMMIT_DELETE_PATH": (("delete_path",), str),
    "GH_COMMIT_RATE_LIMIT_RETRIES": (("api", "rate_limit_retries"), _non_negative_int),
    "GH_COMMIT_RATE_LIMIT_WAIT": (("api", "rate_limit_wait"), float),
    "GH_COMMIT_FORCE_UPDATE": (("api", "force_update"), _boolean),
}

# Numeric and boolean overrides are ignored when set to an empty string
_TEXT_OVERRIDES = {"GH_COMMIT_BRANCH", "GH_COMMIT_MESSAGE", "GH_COMMIT_DELETE_PATH"}


def get_xdg_config_home() -> Path:
    """Return $XDG_CONFIG_HOME, or ~/.config when it is unset."""
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    return get_xdg_config_home() / APP_NAME / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / PROJECT_CONFIG_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``, recursing into nested dicts.

    Example:
        >>> deep_merge({"branch": "main", "api": {"timeout": 10}}, {"api": {"timeout": 30}})
        {'branch': 'main', 'api': {'timeout': 30}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read a JSON object from ``path``.

    Returns None when the file is missing, unreadable, malformed or not an
    object. Broken config files are reported but never fatal.
    """
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        print(f"Warning: Failed to parse config at {path}: {e}")
        return None

    return data if isinstance(data, dict) else None


def _set_path(config: dict[str, Any], keys: tuple[str, ...], value: Any) -> dict[str, Any]:
    head, *rest = keys
    if not rest:
        return {**config, head: value}
    nested = config.get(head)
    if not isinstance(nested, dict):
        nested = {}
    return {**config, head: _set_path(nested, tuple(rest), value)}


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply GH_COMMIT_* environment variables (see ENV_OVERRIDES).

    Values that fail to parse print a warning and are ignored.
    """
    result = dict(config_dict)

    for env_name, (keys, parse) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None or (raw == "" and env_name not in _TEXT_OVERRIDES):
            continue
        try:
            value = parse(raw)
        except ValueError as e:
            print(f"Warning: Invalid {env_name} value '{raw}' ({e}), ignoring")
            continue
        result = _set_path(result, keys, value)

    return result


def get_default_config() -> dict[str, Any]:
    """Defaults as a plain dict, taken from the config model itself."""
    return GhCommitConfig().model_dump()


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> GhCommitConfig:
    """
    Load and validate the layered configuration.

    Args:
        project_dir: Working copy holding .gh-commit.json (defaults to cwd)
        use_cache: Return the configuration loaded earlier in this process

    Raises:
        ValidationError: If the merged configuration is invalid
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        if layer := load_json_file(path):
            merged = deep_merge(merged, layer)

    _config_cache = GhCommitConfig(**apply_env_overrides(merged))
    return _config_cache


def clear_cache() -> None:
    """Forget the cached configuration."""
    global _config_cache
    _config_cache = None
