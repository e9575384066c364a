"""FIT profile constants shared by the codec and the fusion core."""

from __future__ import annotations

from enum import Enum
from typing import Any

from fit_tool.profile.profile_type import Manufacturer, MesgNum, SubSport

__all__ = [
    "DEFAULT_PRIMARY_MANUFACTURER",
    "DEFAULT_SECONDARY_MANUFACTURER",
    "TIMESTAMP_RESOLUTION",
    "VIRTUAL_ACTIVITY",
    "enum_code",
    "is_well_known",
    "manufacturer_name",
    "to_seconds",
]

DEFAULT_PRIMARY_MANUFACTURER = Manufacturer.GARMIN.value
DEFAULT_SECONDARY_MANUFACTURER = Manufacturer.ZWIFT.value

VIRTUAL_ACTIVITY = SubSport.VIRTUAL_ACTIVITY

# fit_tool exposes date_time fields as milliseconds since the Unix epoch.
TIMESTAMP_RESOLUTION = 1000

_MFG_RANGE = (MesgNum.MFG_RANGE_MIN.value, MesgNum.MFG_RANGE_MAX.value)
_KNOWN_MESG_NUMS = frozenset(
    member.value
    for member in MesgNum
    if not _MFG_RANGE[0] <= member.value <= _MFG_RANGE[1]
)


def enum_code(value: Any) -> Any:
    """Return the raw integer behind ``value`` when it is an enum member."""

    if isinstance(value, Enum):
        return value.value
    return value


def is_well_known(global_id: Any) -> bool:
    """Return ``True`` when ``global_id`` names a message of the FIT profile."""

    code = enum_code(global_id)
    if not isinstance(code, int):
        return False
    return code in _KNOWN_MESG_NUMS


def manufacturer_name(code: int) -> str:
    try:
        return Manufacturer(code).name.replace("_", " ").title()
    except ValueError:
        return f"manufacturer {code}"


def to_seconds(value: Any) -> int | None:
    """Convert a decoded date_time value into whole FIT seconds."""

    if value is None:
        return None
    return int(value) // TIMESTAMP_RESOLUTION
