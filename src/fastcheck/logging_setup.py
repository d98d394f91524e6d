"""Logging configuration for the command line."""

import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr; stdout carries only command output."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )
