"""Read FIT recordings into a stream of tagged messages.

The file is read in one go and parsed by :mod:`fit_tool`, which verifies the
header and file CRCs. :func:`decode` returns a one-shot iterator over the
classified messages in file order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

from fit_tool.developer_field import DeveloperField
from fit_tool.exceptions import FitCRCError, FitError
from fit_tool.fit_file import FitFile

from ..errors import ErrorKind, MergeError
from ..messages import LapSummary, Message, PositionalRecord, SessionSummary, classify

__all__ = ["check_integrity", "decode"]

logger = logging.getLogger(__name__)

_REWRITTEN = (PositionalRecord, LapSummary, SessionSummary)


def check_integrity(buffer: bytes, path: Path | str) -> FitFile:
    """Parse ``buffer`` and return the file once its CRCs have been verified."""

    try:
        return FitFile.from_bytes(buffer)
    except FitCRCError as exc:
        logger.debug(
            "FIT checksum mismatch.",
            extra={"event": "codec.crc_mismatch", "path": str(path), "detail": str(exc)},
        )
        raise MergeError(ErrorKind.INTEGRITY_CHECK_FAILED, path=path) from exc
    except FitError as exc:
        raise MergeError(ErrorKind.INTEGRITY_CHECK_FAILED, path=path) from exc


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise MergeError(ErrorKind.FILE_NOT_FOUND, path=path) from exc
    except OSError as exc:
        raise MergeError(ErrorKind.STREAM_FAILURE, path=path) from exc


def _copy_developer_field(field: DeveloperField) -> DeveloperField:
    copy = DeveloperField.from_developer_field(field)
    copy.encoded_values = list(field.encoded_values)
    return copy


def _writable_copy(message: Any) -> Any:
    """Return a definition-free copy of ``message`` holding its decoded values.

    A decoded message only carries the fields of the definition it was read
    with, so fields the fusion core adds would otherwise be discarded. Raw
    encoded values are copied so untouched fields are written back unchanged;
    developer and unknown fields travel with the copy.
    """

    fresh = type(message)(
        developer_fields=[
            _copy_developer_field(field)
            for field in message.developer_fields
            if field.is_valid()
        ]
    )
    for field in message.fields:
        if not field.is_valid():
            continue
        target = fresh.get_field(field.field_id)
        if target is None:
            fresh.fields.append(field)
            continue
        target.encoded_values = list(field.encoded_values)
        target.size = field.size
    return fresh


def _iter_messages(fit_file: FitFile) -> Iterator[Message]:
    for record in fit_file.records:
        message = classify(record.message)
        if isinstance(message, _REWRITTEN):
            message = type(message)(_writable_copy(message.payload))
        yield message


def decode(path: Path | str) -> Iterator[Message]:
    """Return the classified messages of the FIT file at ``path``.

    Reading and integrity checks happen before this function returns so a
    corrupt file fails before any message is consumed.
    """

    path = Path(path)
    buffer = _read_bytes(path)
    fit_file = check_integrity(buffer, path)
    logger.debug(
        "FIT file decoded.",
        extra={
            "event": "codec.decoded",
            "path": str(path),
            "size": len(buffer),
            "records": len(fit_file.records),
        },
    )
    return _iter_messages(fit_file)
