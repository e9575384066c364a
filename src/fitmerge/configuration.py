"""Read the ``[tool.fitmerge]`` table of a ``pyproject.toml`` file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from .errors import ErrorKind, MergeError

__all__ = ["PROJECT_FILENAME", "load_project_config", "resolve_pyproject_path"]

PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "fitmerge"


def resolve_pyproject_path(candidate: Path) -> Path | None:
    """Map a ``--config`` style argument onto a ``pyproject.toml`` path.

    A directory stands for the ``pyproject.toml`` inside it; any other file
    name is not a project file and yields ``None``.
    """

    candidate = candidate.expanduser()
    if candidate.name == PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / PROJECT_FILENAME


def _read_toml(path: Path) -> dict[str, Any] | None:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as exc:
        raise MergeError(ErrorKind.CONFIGURATION_INVALID, path=path, detail=str(exc)) from exc
    except OSError as exc:
        raise MergeError(
            ErrorKind.CONFIGURATION_INVALID, path=path, detail=exc.strerror or str(exc)
        ) from exc


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Return the ``[tool.fitmerge]`` table and the file it was read from.

    ``None`` means there is no such file or it has no fitmerge table. A file
    that exists but cannot be read or parsed raises ``ConfigurationInvalid``.
    """

    pyproject_path = resolve_pyproject_path(path)
    if pyproject_path is None:
        return None
    pyproject_path = pyproject_path.resolve(strict=False)

    document = _read_toml(pyproject_path)
    section = (document or {}).get("tool", {})
    if isinstance(section, dict):
        section = section.get(_TOOL_SECTION)
    if not isinstance(section, dict):
        return None
    return dict(section), pyproject_path
