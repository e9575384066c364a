"""Command line application entry point for fitmerge."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence

from ..errors import MergeError
from ..logging.config import setup_logging
from ..merge import MSG_MERGE_SUCCESS, MergeSettings, MergeSummary, notify, run_merge
from .errors import CliError, log_cli_error
from .io import load_cli_config
from .parser import (
    USAGE_MESSAGE,
    _MergeArgumentParser,
    build_parser,
    build_request,
    normalise_argv,
)


class ConsoleObserver:
    """Collect the outcome of a merge for console reporting."""

    def __init__(self) -> None:
        self.message: Optional[str] = None
        self.error: Optional[CliError] = None

    def on_success(self, summary: MergeSummary) -> None:
        self.message = MSG_MERGE_SUCCESS

    def on_error(self, error: MergeError) -> None:
        self.error = CliError(error)


def _write(message: str) -> None:
    sys.stdout.write(message)
    if not message.endswith("\n"):
        sys.stdout.write("\n")


def _configure(argv: Sequence[str]) -> dict:
    config_parser = _MergeArgumentParser(add_help=False, allow_abbrev=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument("--log-format", dest="log_format", default=None)
    preliminary, _ = config_parser.parse_known_args(list(argv))

    try:
        config = load_cli_config(preliminary.config_path)
    except MergeError as exc:
        raise CliError(exc) from exc
    logging_config = dict(config.get("logging", {}))
    if preliminary.log_level is not None:
        logging_config["level"] = preliminary.log_level
    if preliminary.log_output is not None:
        logging_config["output"] = preliminary.log_output
    if preliminary.log_format is not None:
        logging_config["format"] = preliminary.log_format
    logging_config.setdefault("level", "warning")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    config["logging"] = logging_config
    setup_logging(config)
    return config


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the fitmerge command line interface."""

    argv = normalise_argv(sys.argv[1:] if args is None else args)
    if not argv or "--help" in argv:
        _write(USAGE_MESSAGE)
        return USAGE_MESSAGE

    observer = ConsoleObserver()
    try:
        config = _configure(argv)
        namespace = build_parser(config).parse_intermixed_args(argv)
        request = build_request(namespace)
        result = run_merge(request, MergeSettings.from_config(config))
        notify(result, [observer])
        if observer.error is not None:
            raise observer.error
    except CliError as exc:
        if not exc.logged:
            log_cli_error(exc.payload, exc_info=exc)
            exc.logged = True
        _write(exc.payload.message)
        raise SystemExit(exc.status_code) from exc

    message = observer.message or MSG_MERGE_SUCCESS
    _write(message)
    return message


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
