"""Error reporting for the fitmerge command line tool.

Every failure the CLI reports is a :class:`~fitmerge.errors.MergeError`. The
helpers here turn one into the payload that is logged and the exit status the
process ends with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..errors import ErrorKind, MergeError

__all__ = ["CliError", "ErrorPayload", "log_cli_error", "status_code_for"]


_STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

logger = logging.getLogger("fitmerge.cli")


def status_code_for(category: str) -> int:
    """Exit status of a failure in ``category``; unknown categories are runtime."""

    return _STATUS_CODES.get(category, _STATUS_CODES["runtime"])


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What the CLI reports about a failed merge."""

    kind: ErrorKind
    category: str
    status_code: int
    message: str
    path: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def from_merge_error(cls, error: MergeError) -> "ErrorPayload":
        return cls(
            kind=error.kind,
            category=error.category,
            status_code=status_code_for(error.category),
            message=error.message,
            path=None if error.path is None else str(error.path),
            detail=error.detail,
        )

    def as_dict(self) -> Mapping[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "category": self.category,
            "status_code": self.status_code,
            "message": self.message,
        }
        if self.path is not None:
            payload["path"] = self.path
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


def log_cli_error(
    payload: ErrorPayload,
    *,
    exc_info: Optional[BaseException] = None,
) -> None:
    fields = dict(payload.as_dict())
    message = fields.pop("message")
    logger.error(message, extra={"event": "cli.error", **fields}, exc_info=exc_info)


class CliError(RuntimeError):
    """A :class:`MergeError` on its way out of the CLI."""

    __slots__ = ("error", "payload", "logged")

    def __init__(self, error: MergeError, *, logged: bool = False) -> None:
        super().__init__(error.message)
        self.error = error
        self.payload = ErrorPayload.from_merge_error(error)
        self.logged = logged

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def status_code(self) -> int:
        return self.payload.status_code
