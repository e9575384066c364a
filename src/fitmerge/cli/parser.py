"""Argument parsing helpers for the fitmerge CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, NoReturn, Optional, Sequence

from ..errors import ErrorKind, MergeError
from ..merge import MergeRequest
from .errors import CliError

__all__ = [
    "ARG_FORCE",
    "ARG_OUTPUT",
    "ARG_OUTPUT_FORCE",
    "ARG_PRIMARY",
    "ARG_SECONDARY",
    "HELP_ALIASES",
    "USAGE_MESSAGE",
    "build_parser",
    "build_request",
    "normalise_argv",
]

ARG_FORCE = "-f"
ARG_PRIMARY = "-g"
ARG_SECONDARY = "-z"
ARG_OUTPUT = "-o"
ARG_OUTPUT_FORCE = "-of"
HELP_ALIASES = ("--help", "/?")

USAGE_MESSAGE = f"""
Merges secondary file/s location into a primary file.

fitmerge {ARG_PRIMARY} primary_file {ARG_SECONDARY} secondary_file/s [{ARG_OUTPUT} output_file] [{ARG_FORCE}]

 {ARG_PRIMARY} primary_file       The primary Fit file. Requires 1 only primary file.

 {ARG_SECONDARY} secondary_file/s The secondary Fit file/s. Requires 1 or more files.
                     The order of the files is not important. They will be sorted.

 {ARG_OUTPUT} output_file        Specify the output file name.
                     Defaults to the name of the first secondary file with .merged.fit

 {ARG_FORCE}                  Allows overwrite of existing secondary/output file.
                     Does not allow overwrite of primary file.
                     Can be combined with {ARG_OUTPUT} switch eg. {ARG_OUTPUT_FORCE}

 --config PATH       pyproject.toml holding a [tool.fitmerge] table.
 --log-level LEVEL   Logging level (default: warning).
 --log-output DEST   Logging destination (stdout, stderr or a file path).
 --log-format FMT    Logging formatter (json or text).

 Note that paths must be quoted if they contain spaces.
"""


class _MergeArgumentParser(argparse.ArgumentParser):
    """Parser reporting malformed input as a usage :class:`CliError`."""

    def error(self, message: str) -> NoReturn:
        raise CliError(MergeError(ErrorKind.ARGUMENT_FORMAT, detail=message))


class _OutputForceAction(argparse.Action):
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: Optional[str] = None,
    ) -> None:
        namespace.output_path = values
        namespace.allow_overwrite = True


def normalise_argv(argv: Sequence[str]) -> list[str]:
    """Map the Windows style ``/?`` switch onto ``--help``."""

    return ["--help" if arg in HELP_ALIASES else arg for arg in argv]


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}

    parser = _MergeArgumentParser(
        prog="fitmerge",
        description="Merge secondary FIT location data into a primary FIT file.",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("--help", dest="show_help", action="store_true")
    parser.add_argument(ARG_FORCE, dest="allow_overwrite", action="store_true")
    parser.add_argument(ARG_PRIMARY, dest="primary_path", type=Path, default=None)
    parser.add_argument(
        ARG_SECONDARY, dest="secondary_paths", type=Path, action="append", default=None
    )
    parser.add_argument(ARG_OUTPUT, dest="output_path", type=Path, default=None)
    parser.add_argument(ARG_OUTPUT_FORCE, dest="output_path", type=Path, action=_OutputForceAction)
    parser.add_argument("paths", nargs="*", type=Path)
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the TOML configuration file to load.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "warning"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )
    return parser


def build_request(namespace: argparse.Namespace) -> MergeRequest:
    """Collect the merge paths held by ``namespace``."""

    request = MergeRequest(
        primary_path=namespace.primary_path,
        output_path=namespace.output_path,
        allow_overwrite=bool(namespace.allow_overwrite),
    )
    for path in list(namespace.secondary_paths or []) + list(namespace.paths or []):
        request.add_secondary(path)
    return request
