"""Convenience re-exports for test helpers."""

from __future__ import annotations

from .fit_files import DEVELOPER_FIELD_NAME, build_primary_file, build_secondary_file
from .messages import (
    GARMIN,
    VENDOR_MESG_NUM,
    ZWIFT,
    RecordingWriter,
    build_collection,
    build_dataset,
    build_definition,
    build_identity,
    build_lap,
    build_other,
    build_record,
    build_sample,
    build_secondary_record,
    build_session,
    build_track,
    snapshot,
)

__all__ = [
    "DEVELOPER_FIELD_NAME",
    "GARMIN",
    "VENDOR_MESG_NUM",
    "ZWIFT",
    "RecordingWriter",
    "build_collection",
    "build_dataset",
    "build_definition",
    "build_identity",
    "build_lap",
    "build_other",
    "build_primary_file",
    "build_record",
    "build_sample",
    "build_secondary_file",
    "build_secondary_record",
    "build_session",
    "build_track",
    "snapshot",
]
