"""Single-pass fusion of secondary samples into a primary message stream.

:class:`FusionEngine` consumes the primary recording one message at a time.
Positional records whose timestamp has a secondary :class:`Sample` are
rewritten with the sample's values and a spliced distance; lap and session
messages receive totals recomputed from the running :class:`FusionState`.
Everything else passes through untouched, except messages that are not part
of the FIT profile, which are dropped.

The engine never looks ahead or back: each step sees the state left by the
previous one and the current message only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .errors import ErrorKind, MergeError
from .messages import (
    Identity,
    LapSummary,
    Message,
    PositionalRecord,
    SessionSummary,
)
from .profile import DEFAULT_PRIMARY_MANUFACTURER, manufacturer_name
from .secondary import Sample, SecondaryCollection

__all__ = ["FusionEngine", "FusionState", "MessageWriter", "fuse"]

logger = logging.getLogger(__name__)


class MessageWriter(Protocol):
    def write(self, message: Message) -> None:
        ...


@dataclass
class FusionState:
    """Running totals of one merge."""

    session_ascent: float = 0.0
    session_descent: float = 0.0
    lap_ascent: float = 0.0
    lap_descent: float = 0.0
    last_altitude: float = 0.0
    total_distance: float = 0.0
    distance_offset: Optional[float] = None
    lap_start_distance: float = 0.0
    max_session_speed: float = 0.0
    max_lap_speed: float = 0.0
    start_timestamp: Optional[int] = None
    lap_start_timestamp: Optional[int] = None
    last_timestamp: Optional[int] = None
    current_dataset_index: int = 0
    current_dataset_boundary: Optional[int] = None
    matched_records: int = 0
    passthrough_records: int = 0
    dropped_messages: int = 0
    laps: int = 0
    sessions: int = 0

    @property
    def session_elapsed(self) -> int:
        return _elapsed(self.start_timestamp, self.last_timestamp)

    @property
    def lap_elapsed(self) -> int:
        return _elapsed(self.lap_start_timestamp, self.last_timestamp)

    def reset_lap(self, timestamp: Optional[int]) -> None:
        self.lap_ascent = 0.0
        self.lap_descent = 0.0
        self.max_lap_speed = 0.0
        self.lap_start_timestamp = timestamp
        self.lap_start_distance = self.total_distance


def _elapsed(start: Optional[int], end: Optional[int]) -> int:
    if start is None or end is None:
        return 0
    return end - start


def _average(distance: float, elapsed: int) -> float:
    if elapsed <= 0:
        return 0.0
    return distance / elapsed


class FusionEngine:
    """Stateless step function over :class:`FusionState`."""

    def __init__(
        self,
        collection: SecondaryCollection,
        *,
        expected_source: int = DEFAULT_PRIMARY_MANUFACTURER,
        source_path: Optional[Path | str] = None,
    ) -> None:
        if not len(collection):
            raise ValueError("FusionEngine requires at least one secondary dataset")
        self.collection = collection
        self.expected_source = expected_source
        self.source_path = source_path

    def step(
        self, state: FusionState, message: Message
    ) -> tuple[FusionState, Optional[Message]]:
        """Apply ``message`` to ``state`` and return the message to write, if any."""

        if not message.is_well_known:
            state.dropped_messages += 1
            logger.debug(
                "Dropping message outside the FIT profile.",
                extra={
                    "event": "fusion.dropped_message",
                    "global_id": message.global_id,
                    "variant": type(message).__name__,
                },
            )
            return state, None

        if isinstance(message, PositionalRecord):
            self._on_record(state, message)
        elif isinstance(message, LapSummary):
            self._on_lap(state, message)
        elif isinstance(message, SessionSummary):
            self._on_session(state, message)
        elif isinstance(message, Identity):
            self._on_identity(message)
        return state, message

    def _on_record(self, state: FusionState, message: PositionalRecord) -> None:
        timestamp = message.timestamp
        sample = self.collection.lookup(timestamp)
        if sample is None:
            state.passthrough_records += 1
            return

        if state.start_timestamp is None:
            state.start_timestamp = timestamp
            state.lap_start_timestamp = timestamp
            state.last_altitude = sample.altitude
            state.current_dataset_boundary = self.collection.boundary(0)
        elif (
            state.current_dataset_boundary is not None
            and timestamp > state.current_dataset_boundary
        ):
            self._cross_boundary(state, sample, timestamp)

        delta = sample.altitude - state.last_altitude
        if delta > 0:
            state.session_ascent += delta
            state.lap_ascent += delta
        elif delta < 0:
            state.session_descent -= delta
            state.lap_descent -= delta
        state.last_altitude = sample.altitude

        if state.distance_offset is None:
            state.distance_offset = -sample.distance
        state.total_distance = sample.distance + state.distance_offset

        state.max_session_speed = max(state.max_session_speed, sample.speed)
        state.max_lap_speed = max(state.max_lap_speed, sample.speed)

        message.rewrite(sample, state.total_distance)
        state.last_timestamp = timestamp
        state.matched_records += 1

    def _cross_boundary(self, state: FusionState, sample: Sample, timestamp: int) -> None:
        last_index = len(self.collection) - 1
        if state.current_dataset_index >= last_index:
            # Samples past the last session end still belong to the last dataset.
            state.current_dataset_boundary = None
            return

        index = state.current_dataset_index + 1
        while index < last_index and self.collection.boundary(index) < timestamp:
            index += 1
        state.current_dataset_index = index
        state.current_dataset_boundary = self.collection.boundary(index)

        state.distance_offset = state.total_distance
        state.last_altitude = sample.altitude
        state.reset_lap(timestamp)
        logger.info(
            "Secondary dataset boundary crossed.",
            extra={
                "event": "fusion.dataset_boundary",
                "record_timestamp": timestamp,
                "dataset_index": index,
                "path": str(self.collection.datasets[index].path),
                "distance_offset": state.distance_offset,
            },
        )

    def _on_lap(self, state: FusionState, message: LapSummary) -> None:
        elapsed = state.lap_elapsed
        distance = state.total_distance - state.lap_start_distance
        message.write_totals(
            ascent=state.lap_ascent,
            descent=state.lap_descent,
            distance=distance,
            avg_speed=_average(distance, elapsed),
            max_speed=state.max_lap_speed,
            elapsed=elapsed,
        )
        state.reset_lap(state.last_timestamp)
        state.laps += 1

    def _on_session(self, state: FusionState, message: SessionSummary) -> None:
        elapsed = state.session_elapsed
        message.write_totals(
            ascent=state.session_ascent,
            descent=state.session_descent,
            distance=state.total_distance,
            avg_speed=_average(state.total_distance, elapsed),
            max_speed=state.max_session_speed,
            elapsed=elapsed,
        )
        state.sessions += 1

    def _on_identity(self, message: Identity) -> None:
        if message.source_identity != self.expected_source:
            raise MergeError(
                ErrorKind.SOURCE_MISMATCH,
                path=self.source_path,
                source=manufacturer_name(self.expected_source),
            )


def fuse(
    collection: SecondaryCollection,
    messages: Iterable[Message],
    writer: MessageWriter,
    *,
    expected_source: int = DEFAULT_PRIMARY_MANUFACTURER,
    source_path: Optional[Path | str] = None,
) -> FusionState:
    """Stream ``messages`` through a fresh engine into ``writer``."""

    engine = FusionEngine(
        collection, expected_source=expected_source, source_path=source_path
    )
    state = FusionState()
    for message in messages:
        state, forwarded = engine.step(state, message)
        if forwarded is not None:
            writer.write(forwarded)
    return state
