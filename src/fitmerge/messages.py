"""Tagged message variants produced by the FIT decoder.

The decoder hands the fusion core a stream of the variants defined here
rather than raw library objects. Each variant wraps the decoded message as
``payload`` and exposes the handful of fields the core reads or rewrites, so
the core never needs to know how a field is stored or scaled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from fit_tool.definition_message import DefinitionMessage
from fit_tool.profile.profile_type import MesgNum

from .profile import VIRTUAL_ACTIVITY, enum_code, is_well_known, to_seconds

__all__ = [
    "Definition",
    "Identity",
    "LapSummary",
    "Message",
    "Other",
    "PositionalRecord",
    "SessionSummary",
    "classify",
]

SAMPLE_FIELDS = ("altitude", "distance", "position_lat", "position_long", "speed")


@dataclass(frozen=True)
class _Variant:
    payload: Any

    @property
    def global_id(self) -> Optional[int]:
        return enum_code(getattr(self.payload, "global_id", None))

    @property
    def is_well_known(self) -> bool:
        return is_well_known(self.global_id)


@dataclass(frozen=True)
class PositionalRecord(_Variant):
    """A ``record`` message: one timestamped position sample."""

    @property
    def timestamp(self) -> Optional[int]:
        return to_seconds(getattr(self.payload, "timestamp", None))

    def sample_fields(self) -> tuple[Any, ...]:
        """Return altitude, distance, latitude, longitude and speed as decoded."""

        return tuple(getattr(self.payload, name, None) for name in SAMPLE_FIELDS)

    def rewrite(self, sample: Any, distance: float) -> None:
        payload = self.payload
        payload.altitude = sample.altitude
        payload.enhanced_altitude = sample.altitude
        payload.distance = distance
        payload.position_lat = sample.latitude
        payload.position_long = sample.longitude
        payload.speed = sample.speed
        payload.enhanced_speed = sample.speed


@dataclass(frozen=True)
class _Summary(_Variant):
    def write_totals(
        self,
        *,
        ascent: float,
        descent: float,
        distance: float,
        avg_speed: float,
        max_speed: float,
        elapsed: float,
    ) -> None:
        payload = self.payload
        # total_ascent/total_descent are whole metres in the profile.
        payload.total_ascent = round(ascent)
        payload.total_descent = round(descent)
        payload.total_distance = distance
        payload.avg_speed = avg_speed
        payload.max_speed = max_speed
        payload.enhanced_avg_speed = avg_speed
        payload.enhanced_max_speed = max_speed
        payload.total_elapsed_time = float(elapsed)
        payload.total_timer_time = float(elapsed)
        payload.sub_sport = VIRTUAL_ACTIVITY


@dataclass(frozen=True)
class LapSummary(_Summary):
    """A ``lap`` message."""


@dataclass(frozen=True)
class SessionSummary(_Summary):
    """A ``session`` message."""

    @property
    def timestamp(self) -> Optional[int]:
        return to_seconds(getattr(self.payload, "timestamp", None))


@dataclass(frozen=True)
class Identity(_Variant):
    """The ``file_id`` message naming the recording device."""

    @property
    def source_identity(self) -> Optional[int]:
        return enum_code(getattr(self.payload, "manufacturer", None))

    @property
    def creation_timestamp(self) -> Optional[int]:
        return to_seconds(getattr(self.payload, "time_created", None))


@dataclass(frozen=True)
class Other(_Variant):
    """Any data message the core forwards without looking inside."""


@dataclass(frozen=True)
class Definition(_Variant):
    """A message definition preceding data messages of one local type."""


Message = Union[PositionalRecord, LapSummary, SessionSummary, Identity, Other, Definition]

_DATA_VARIANTS = {
    MesgNum.RECORD.value: PositionalRecord,
    MesgNum.LAP.value: LapSummary,
    MesgNum.SESSION.value: SessionSummary,
    MesgNum.FILE_ID.value: Identity,
}


def classify(raw: Any) -> Message:
    """Wrap a decoded ``fit_tool`` message in its variant."""

    if isinstance(raw, DefinitionMessage):
        return Definition(raw)
    variant = _DATA_VARIANTS.get(enum_code(getattr(raw, "global_id", None)), Other)
    return variant(raw)
