"""Configuration discovery for the fitmerge CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from fitmerge.configuration import PROJECT_FILENAME, load_project_config

CONFIG_ENV_VAR = "FITMERGE_CONFIG"


def _config_sources(path: Optional[Path]) -> Iterator[Path]:
    if path is not None:
        yield path
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        yield Path(env_config)
    yield Path.cwd() / PROJECT_FILENAME


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from ``pyproject.toml`` files.

    An explicit ``path`` wins over ``$FITMERGE_CONFIG``, which wins over the
    ``pyproject.toml`` of the working directory. The first file holding a
    ``[tool.fitmerge]`` table is used.
    """

    for source in _config_sources(path):
        loaded = load_project_config(source)
        if loaded is None:
            continue
        table, resolved = loaded
        config = {str(key): value for key, value in table.items()}
        config["_config_path"] = str(resolved)
        return config

    return {"_config_path": None}


__all__ = ["CONFIG_ENV_VAR", "load_cli_config"]
