"""Resolve and validate the installed fitmerge version."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "fitmerge"


def _version_from_pyproject() -> str:
    """Read ``[project].version`` from the source checkout.

    Used when the package runs from a checkout that was never installed, so
    no distribution metadata exists.
    """

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
    except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
        import tomli as tomllib  # type: ignore

    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if pyproject.is_file():
        with pyproject.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
        version = project.get("version")
        if isinstance(version, str):
            return version
    raise RuntimeError(
        f"Unable to determine the {_DISTRIBUTION!r} version from package metadata "
        "or pyproject.toml."
    )


def _load_version() -> str:
    try:
        raw_version = metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        raw_version = _version_from_pyproject()

    try:
        parsed = Version(raw_version)
    except InvalidVersion as exc:
        raise RuntimeError(
            f"Invalid version string for {_DISTRIBUTION!r}: {raw_version!r}."
        ) from exc
    if len(parsed.release) != 3:
        raise RuntimeError(
            f"The {_DISTRIBUTION!r} version must follow MAJOR.MINOR.PATCH; "
            f"found {raw_version!r}."
        )
    return raw_version


__version__ = _load_version()

__all__ = ["__version__"]
