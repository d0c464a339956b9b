"""Locate and load the ``.env`` file for the ``mdscrape`` command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "mdscrape"
CONFIG_ENV_FILE = CONFIG_DIR / ".env"
EXAMPLE_ENV_FILE = Path(__file__).resolve().parent.parent / ".env.example"


def _candidates(cwd: Path, config_env_file: Path) -> List[Path]:
    return [cwd / ".env", config_env_file]


def load_config(
    *,
    config_dir: Path,
    config_env_file: Path,
    cwd: Path,
    load_env: Callable[[Path], bool],
    copy_file: Callable[[Path, Path], str],
    example_file: Optional[Path] = None,
) -> Optional[Path]:
    """Load the first ``.env`` found and return its path.

    ``./.env`` wins over ``~/.config/mdscrape/.env``. With neither present,
    ``.env.example`` is copied into the user config directory and loaded.
    Returns None when nothing was loaded.
    """
    for candidate in _candidates(cwd, config_env_file):
        if candidate.is_file():
            load_env(candidate)
            return candidate

    example = EXAMPLE_ENV_FILE if example_file is None else example_file
    if not example.is_file():
        return None

    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        copy_file(example, config_env_file)
    except OSError as exc:
        LOGGER.debug("Could not seed %s: %s", config_env_file, exc)
        return None

    LOGGER.info("Created %s from %s", config_env_file, example.name)
    load_env(config_env_file)
    return config_env_file
