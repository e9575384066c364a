"""Positional samples extracted from secondary recordings.

A secondary recording contributes altitude, distance, position and speed.
:func:`extract_dataset` reads one decoded stream into a
:class:`SecondaryDataset`; :class:`SecondaryCollection` orders several
datasets by creation time and merges their samples into one lookup keyed by
timestamp.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from .errors import ErrorKind, MergeError
from .messages import Identity, Message, PositionalRecord, SessionSummary
from .profile import DEFAULT_SECONDARY_MANUFACTURER, manufacturer_name

__all__ = ["Sample", "SecondaryCollection", "SecondaryDataset", "extract_dataset"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """Validated positional values of one secondary timestamp."""

    timestamp: int
    altitude: float
    distance: float
    latitude: float
    longitude: float
    speed: float


@dataclass
class SecondaryDataset:
    """Samples and metadata read from a single secondary recording."""

    path: Path
    source_identity: int
    creation_timestamp: int
    session_end_timestamp: int
    samples: dict[int, Sample] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.samples)


def extract_dataset(
    path: Path | str,
    messages: Iterable[Message],
    *,
    expected_source: int = DEFAULT_SECONDARY_MANUFACTURER,
) -> SecondaryDataset:
    """Build a :class:`SecondaryDataset` from the decoded stream of ``path``.

    Records missing any of the five positional fields are skipped. A record
    without a timestamp, an identity message naming another manufacturer or
    lacking a creation time, and a session without an end timestamp are
    fatal for the dataset.
    """

    path = Path(path)
    samples: dict[int, Sample] = {}
    source_identity: Optional[int] = None
    creation_timestamp: Optional[int] = None
    session_end_timestamp: Optional[int] = None
    skipped = 0

    for message in messages:
        if isinstance(message, PositionalRecord):
            values = message.sample_fields()
            if any(value is None for value in values):
                skipped += 1
                continue
            timestamp = message.timestamp
            if timestamp is None:
                raise MergeError(ErrorKind.MISSING_TIMESTAMP, path=path)
            altitude, distance, latitude, longitude, speed = (float(v) for v in values)
            samples[timestamp] = Sample(
                timestamp=timestamp,
                altitude=altitude,
                distance=distance,
                latitude=latitude,
                longitude=longitude,
                speed=speed,
            )
        elif isinstance(message, Identity):
            source_identity = message.source_identity
            if source_identity != expected_source:
                raise MergeError(
                    ErrorKind.SOURCE_MISMATCH,
                    path=path,
                    source=manufacturer_name(expected_source),
                )
            creation_timestamp = message.creation_timestamp
            if creation_timestamp is None:
                raise MergeError(ErrorKind.MISSING_CREATION_TIME, path=path)
        elif isinstance(message, SessionSummary):
            session_end_timestamp = message.timestamp
            if session_end_timestamp is None:
                raise MergeError(ErrorKind.MISSING_SESSION_END, path=path)

    if source_identity is None or creation_timestamp is None:
        raise MergeError(ErrorKind.MISSING_CREATION_TIME, path=path)
    if session_end_timestamp is None:
        raise MergeError(ErrorKind.MISSING_SESSION_END, path=path)

    logger.debug(
        "Secondary recording extracted.",
        extra={
            "event": "secondary.extracted",
            "path": str(path),
            "samples": len(samples),
            "skipped_records": skipped,
            "time_created": creation_timestamp,
            "session_end": session_end_timestamp,
        },
    )
    return SecondaryDataset(
        path=path,
        source_identity=source_identity,
        creation_timestamp=creation_timestamp,
        session_end_timestamp=session_end_timestamp,
        samples=samples,
    )


class SecondaryCollection:
    """Secondary datasets ordered by creation time."""

    __slots__ = ("_datasets", "_combined")

    def __init__(self, datasets: Iterable[SecondaryDataset]) -> None:
        self._datasets: tuple[SecondaryDataset, ...] = tuple(
            sorted(datasets, key=lambda dataset: dataset.creation_timestamp)
        )
        combined: dict[int, Sample] = {}
        for dataset in self._datasets:
            combined.update(dataset.samples)
        self._combined = combined

    @property
    def datasets(self) -> Sequence[SecondaryDataset]:
        return self._datasets

    @property
    def combined_samples(self) -> Mapping[int, Sample]:
        return self._combined

    @property
    def first_path(self) -> Path:
        return self._datasets[0].path

    def boundary(self, index: int) -> int:
        """Return the session end timestamp of the dataset at ``index``."""

        return self._datasets[index].session_end_timestamp

    def lookup(self, timestamp: Optional[int]) -> Optional[Sample]:
        if timestamp is None:
            return None
        return self._combined.get(timestamp)

    def __len__(self) -> int:
        return len(self._datasets)

    def __iter__(self):
        return iter(self._datasets)
