"""Error kinds raised while merging FIT recordings."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

__all__ = ["ErrorKind", "MergeError"]


class ErrorKind(str, Enum):
    """Closed set of failures a merge can end with."""

    INTEGRITY_CHECK_FAILED = "IntegrityCheckFailed"
    SOURCE_MISMATCH = "SourceMismatch"
    MISSING_CREATION_TIME = "MissingCreationTime"
    MISSING_SESSION_END = "MissingSessionEnd"
    MISSING_TIMESTAMP = "MissingTimestamp"
    NO_SECONDARY_PATHS = "NoSecondaryPaths"
    NO_PRIMARY_PATH = "NoPrimaryPath"
    OVERWRITE_FORBIDDEN = "OverwriteForbidden"
    OVERWRITE_OF_PRIMARY_FORBIDDEN = "OverwriteOfPrimaryForbidden"
    OUTPUT_WRITE_FAILURE = "OutputWriteFailure"
    STREAM_FAILURE = "StreamFailure"
    FILE_NOT_FOUND = "FileNotFound"
    ARGUMENT_FORMAT = "ArgumentFormat"
    CONFIGURATION_INVALID = "ConfigurationInvalid"
    UNEXPECTED = "Unexpected"


_MESSAGES: Mapping[ErrorKind, str] = {
    ErrorKind.INTEGRITY_CHECK_FAILED: "Fit file failed integrity check: {path}",
    ErrorKind.SOURCE_MISMATCH: "Fit file manufacturer does not match {source}: {path}",
    ErrorKind.MISSING_CREATION_TIME: "Invalid creation time in Fit file: {path}",
    ErrorKind.MISSING_SESSION_END: "Invalid session end time in Fit file: {path}",
    ErrorKind.MISSING_TIMESTAMP: "Record without timestamp in Fit file: {path}",
    ErrorKind.NO_SECONDARY_PATHS: "You must provide at least one secondary input file.",
    ErrorKind.NO_PRIMARY_PATH: "You must provide one primary input file.",
    ErrorKind.OVERWRITE_FORBIDDEN: (
        'You must supply the force switch "-f" to overwrite existing output file: {path}'
    ),
    ErrorKind.OVERWRITE_OF_PRIMARY_FORBIDDEN: "Overwriting the primary input file is forbidden.",
    ErrorKind.OUTPUT_WRITE_FAILURE: "Can not write output file: {path}",
    ErrorKind.STREAM_FAILURE: "Error reading file stream: {path}",
    ErrorKind.FILE_NOT_FOUND: "File not found: {path}",
    ErrorKind.ARGUMENT_FORMAT: "Error reading input arguments.",
    ErrorKind.CONFIGURATION_INVALID: "Can not read configuration file: {path}",
    ErrorKind.UNEXPECTED: "Caught an unexpected exception.",
}

# Status categories understood by :mod:`fitmerge.cli.errors`.
_CATEGORIES: Mapping[ErrorKind, str] = {
    ErrorKind.NO_SECONDARY_PATHS: "usage",
    ErrorKind.NO_PRIMARY_PATH: "usage",
    ErrorKind.ARGUMENT_FORMAT: "usage",
    ErrorKind.CONFIGURATION_INVALID: "usage",
    ErrorKind.OVERWRITE_FORBIDDEN: "usage",
    ErrorKind.OVERWRITE_OF_PRIMARY_FORBIDDEN: "usage",
    ErrorKind.OUTPUT_WRITE_FAILURE: "io",
    ErrorKind.STREAM_FAILURE: "io",
    ErrorKind.INTEGRITY_CHECK_FAILED: "io",
    ErrorKind.FILE_NOT_FOUND: "not_found",
}


class MergeError(RuntimeError):
    """Terminal failure of a merge attempt.

    ``kind`` names the failure, ``path`` the offending file when there is
    one. The message is rendered from a fixed template per kind unless an
    explicit ``message`` is supplied. ``detail`` keeps the low level reason
    for logs without changing the message shown to the user.
    """

    def __init__(
        self,
        kind: ErrorKind,
        *,
        path: Optional[Path | str] = None,
        source: Optional[str] = None,
        message: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.path = Path(path) if path is not None else None
        self.source = source
        self.detail = detail
        text = message or _MESSAGES[kind].format(
            path="" if path is None else str(path),
            source=source or "the expected source",
        )
        super().__init__(text)

    @property
    def message(self) -> str:
        return str(self)

    @property
    def category(self) -> str:
        return _CATEGORIES.get(self.kind, "runtime")

    def context(self) -> dict[str, object]:
        payload: dict[str, object] = {"kind": self.kind.value}
        if self.path is not None:
            payload["path"] = str(self.path)
        if self.source is not None:
            payload["source"] = self.source
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload
