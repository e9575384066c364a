"""Write tagged messages back into a FIT file."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

from fit_tool.fit_file_builder import FitFileBuilder

from ..errors import ErrorKind, MergeError
from ..messages import Definition, Message

__all__ = ["FitEncoder"]

logger = logging.getLogger(__name__)


class FitEncoder:
    """Buffer messages in order and write them to ``path`` on :meth:`close`.

    Definitions are accepted in stream order, but the builder derives the
    definition actually written from each data message. Rewritten records
    may carry fields their original definition lacked, so re-emitting the
    decoded definitions verbatim would not describe them.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._builder = FitFileBuilder(auto_define=True)
        self._closed = False
        self.messages_written = 0
        self.definitions_seen = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, message: Message) -> None:
        if self._closed:
            raise RuntimeError(f"FitEncoder for {self.path} is already closed")
        if isinstance(message, Definition):
            self.definitions_seen += 1
            return
        self._builder.add(message.payload)
        self.messages_written += 1

    def close(self) -> None:
        """Serialise every buffered message; valid exactly once."""

        if self._closed:
            raise RuntimeError(f"FitEncoder for {self.path} is already closed")
        self._closed = True
        fit_file = self._builder.build()
        try:
            fit_file.to_file(str(self.path))
        except OSError as exc:
            raise MergeError(ErrorKind.OUTPUT_WRITE_FAILURE, path=self.path) from exc
        logger.debug(
            "FIT file written.",
            extra={
                "event": "codec.encoded",
                "path": str(self.path),
                "messages": self.messages_written,
                "definitions": self.definitions_seen,
            },
        )

    def __enter__(self) -> "FitEncoder":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        # A failed merge must not leave a finalized, inconsistent file behind.
        if exc_type is None and not self._closed:
            self.close()
