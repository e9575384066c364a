from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for _entry in (SRC_ROOT, ROOT):
    if str(_entry) not in sys.path:
        sys.path.insert(0, str(_entry))


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ``FITMERGE_CONFIG`` out of the tests."""

    monkeypatch.delenv("FITMERGE_CONFIG", raising=False)


@pytest.fixture()
def fit_files(tmp_path: Path):
    """Real primary and secondary FIT files built with ``fit_tool``."""

    from tests.helpers import build_primary_file, build_secondary_file

    secondary = build_secondary_file(
        tmp_path / "secondary.fit",
        start=1_700_000_000,
        altitudes=[10.0, 12.0, 11.0, 15.0],
        distances=[100.0, 110.0, 125.0, 140.0],
    )
    primary = build_primary_file(tmp_path / "primary.fit", start=1_699_999_999, count=6)
    return primary, secondary
