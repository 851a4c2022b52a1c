"""Layered .env loading.

gh-commit reads its GH_COMMIT_* overrides, and the gh CLI reads GH_TOKEN and
GH_HOST, from the process environment. Those values may also live in .env
files next to the working copy or in the user's config directory:

  process environment > <working copy>/.env.local > <working copy>/.env
  > ~/.config/gh-commit/.env

Values already exported in the process environment are never replaced.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_FILENAMES = (".env", ".env.local")


def user_env_path() -> Path:
    """Path of the user-level .env file (XDG aware)."""
    xdg_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg_home) / "gh-commit" / ".env"


def read_env_files(paths: Iterable[Path]) -> dict[str, str]:
    """
    Merge .env files, later files winning.

    Missing files are skipped and keys without a value are dropped.
    """
    merged: dict[str, str] = {}
    for path in paths:
        path = Path(path)
        if not path.is_file():
            continue
        values = {k: v for k, v in dotenv_values(path).items() if k and v is not None}
        logger.debug("Loaded %d variables from %s", len(values), path)
        merged.update(values)
    return merged


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """Export variables from user and project .env files.

    Args:
        project_dir: working copy holding the project .env files (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        The variables that were exported
    """
    if project_dir is None:
        project_dir = Path.cwd()
    if user_env_paths is None:
        user_env_paths = [user_env_path()]
    if project_env_paths is None:
        project_env_paths = [project_dir / name for name in ENV_FILENAMES]

    layered = read_env_files([*user_env_paths, *project_env_paths])
    exported = {k: v for k, v in layered.items() if k not in os.environ}
    os.environ.update(exported)
    return exported
