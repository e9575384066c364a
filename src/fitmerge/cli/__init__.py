"""Command line utilities for fitmerge."""

from fitmerge.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
