"""Merge orchestration: path checks, extraction, fusion and finalisation."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Protocol, Sequence

from .codec import FitEncoder, decode
from .errors import ErrorKind, MergeError
from .fusion import FusionState, fuse
from .messages import Message
from .profile import DEFAULT_PRIMARY_MANUFACTURER, DEFAULT_SECONDARY_MANUFACTURER
from .secondary import SecondaryCollection, extract_dataset

__all__ = [
    "DEFAULT_OUTPUT_MARKER",
    "MSG_MERGE_SUCCESS",
    "MergeObserver",
    "MergeRequest",
    "MergeResult",
    "MergeSettings",
    "MergeSummary",
    "default_output_path",
    "load_secondaries",
    "merge_files",
    "notify",
    "run_merge",
]

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_MARKER = "merged"
MSG_MERGE_SUCCESS = "Merge completed successfully."

Decoder = Callable[[Path], Iterator[Message]]
EncoderFactory = Callable[[Path], FitEncoder]


@dataclass(frozen=True)
class MergeSettings:
    """Tunable constants of a merge."""

    primary_manufacturer: int = DEFAULT_PRIMARY_MANUFACTURER
    secondary_manufacturer: int = DEFAULT_SECONDARY_MANUFACTURER
    output_marker: str = DEFAULT_OUTPUT_MARKER

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "MergeSettings":
        """Read the ``[merge]`` table of a CLI configuration mapping."""

        section = config.get("merge") if config else None
        if not isinstance(section, ABCMapping):
            return cls()

        def _coerce_int(value: Any, fallback: int) -> int:
            try:
                return int(value)
            except (TypeError, ValueError):
                return fallback

        marker = section.get("output_marker", DEFAULT_OUTPUT_MARKER)
        if not isinstance(marker, str) or not marker.strip("."):
            marker = DEFAULT_OUTPUT_MARKER
        return cls(
            primary_manufacturer=_coerce_int(
                section.get("primary_manufacturer"), DEFAULT_PRIMARY_MANUFACTURER
            ),
            secondary_manufacturer=_coerce_int(
                section.get("secondary_manufacturer"), DEFAULT_SECONDARY_MANUFACTURER
            ),
            output_marker=marker.strip("."),
        )


@dataclass
class MergeRequest:
    """Input and output paths of one merge."""

    primary_path: Optional[Path] = None
    secondary_paths: list[Path] = field(default_factory=list)
    output_path: Optional[Path] = None
    allow_overwrite: bool = False

    def add_secondary(self, path: Path | str) -> None:
        self.secondary_paths.append(Path(path))


@dataclass(frozen=True)
class MergeSummary:
    """Outcome of a successful merge."""

    output_path: Path
    secondary_paths: tuple[Path, ...]
    state: FusionState

    @property
    def total_distance(self) -> float:
        return self.state.total_distance

    @property
    def matched_records(self) -> int:
        return self.state.matched_records


@dataclass(frozen=True)
class MergeResult:
    """Either a :class:`MergeSummary` or the :class:`MergeError` that ended the merge."""

    summary: Optional[MergeSummary] = None
    error: Optional[MergeError] = None

    def __post_init__(self) -> None:
        if (self.summary is None) == (self.error is None):
            raise ValueError("MergeResult holds exactly one of summary or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> MergeSummary:
        if self.summary is None:
            raise self.error  # type: ignore[misc]
        return self.summary


class MergeObserver(Protocol):
    def on_success(self, summary: MergeSummary) -> None:
        ...

    def on_error(self, error: MergeError) -> None:
        ...


def default_output_path(path: Path | str, marker: str = DEFAULT_OUTPUT_MARKER) -> Path:
    """Insert ``.marker`` before the extension of ``path``."""

    path = Path(path)
    if path.suffix:
        return path.with_name(f"{path.stem}.{marker}{path.suffix}")
    return path.with_name(f"{path.name}.{marker}")


def _same_file(first: Path, second: Path) -> bool:
    left = str(first.expanduser().resolve(strict=False))
    right = str(second.expanduser().resolve(strict=False))
    return left.casefold() == right.casefold()


def _check_output(output_path: Path, primary_path: Path, allow_overwrite: bool) -> None:
    if _same_file(output_path, primary_path):
        raise MergeError(ErrorKind.OVERWRITE_OF_PRIMARY_FORBIDDEN, path=output_path)
    if output_path.exists() and not allow_overwrite:
        raise MergeError(ErrorKind.OVERWRITE_FORBIDDEN, path=output_path)
    parent = output_path.expanduser().resolve(strict=False).parent
    if output_path.is_dir() or not parent.is_dir() or not os.access(parent, os.W_OK):
        raise MergeError(ErrorKind.OUTPUT_WRITE_FAILURE, path=output_path)


def load_secondaries(
    paths: Sequence[Path],
    settings: MergeSettings,
    *,
    decoder: Decoder = decode,
) -> SecondaryCollection:
    """Extract every secondary recording, one after another."""

    datasets = [
        extract_dataset(
            path, decoder(path), expected_source=settings.secondary_manufacturer
        )
        for path in paths
    ]
    return SecondaryCollection(datasets)


def merge_files(
    request: MergeRequest,
    settings: MergeSettings | None = None,
    *,
    decoder: Decoder = decode,
    encoder_factory: EncoderFactory = FitEncoder,
) -> MergeSummary:
    """Merge the recordings named by ``request``; raise :class:`MergeError` on failure."""

    settings = settings or MergeSettings()
    if not request.secondary_paths:
        raise MergeError(ErrorKind.NO_SECONDARY_PATHS)
    if request.primary_path is None:
        raise MergeError(ErrorKind.NO_PRIMARY_PATH)

    primary_path = Path(request.primary_path)
    secondary_paths = [Path(path) for path in request.secondary_paths]
    logger.info(
        "Merge started.",
        extra={
            "event": "merge.start",
            "primary": str(primary_path),
            "secondaries": [str(path) for path in secondary_paths],
        },
    )

    collection = load_secondaries(secondary_paths, settings, decoder=decoder)

    if request.output_path is None:
        output_path = default_output_path(collection.first_path, settings.output_marker)
    else:
        output_path = Path(request.output_path)
    _check_output(output_path, primary_path, request.allow_overwrite)

    messages = decoder(primary_path)
    encoder = encoder_factory(output_path)
    with encoder:
        state = fuse(
            collection,
            messages,
            encoder,
            expected_source=settings.primary_manufacturer,
            source_path=primary_path,
        )

    summary = MergeSummary(
        output_path=output_path,
        secondary_paths=tuple(dataset.path for dataset in collection),
        state=state,
    )
    logger.info(
        "Merge completed.",
        extra={
            "event": "merge.complete",
            "output": str(output_path),
            "matched_records": state.matched_records,
            "passthrough_records": state.passthrough_records,
            "dropped_messages": state.dropped_messages,
            "laps": state.laps,
            "total_distance": state.total_distance,
        },
    )
    return summary


def run_merge(
    request: MergeRequest,
    settings: MergeSettings | None = None,
    **kwargs: Any,
) -> MergeResult:
    """Run :func:`merge_files` and capture its outcome as a :class:`MergeResult`."""

    try:
        summary = merge_files(request, settings, **kwargs)
    except MergeError as exc:
        return MergeResult(error=exc)
    except Exception as exc:
        logger.exception(
            "Unexpected merge failure.", extra={"event": "merge.unexpected"}
        )
        error = MergeError(ErrorKind.UNEXPECTED)
        error.__cause__ = exc
        return MergeResult(error=error)
    return MergeResult(summary=summary)


def notify(result: MergeResult, observers: Iterable[MergeObserver]) -> None:
    """Deliver ``result`` to every observer; without observers, failures propagate."""

    targets = list(observers)
    if not targets:
        result.unwrap()
        return
    for observer in targets:
        if result.summary is not None:
            observer.on_success(result.summary)
        else:
            observer.on_error(result.error)  # type: ignore[arg-type]
