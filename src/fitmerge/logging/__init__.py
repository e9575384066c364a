"""Logging utilities for fitmerge."""

from fitmerge.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
