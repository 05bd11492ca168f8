"""Logging setup for the CLI: rich-formatted records on stderr."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "charity_selector"


def configure_logging(verbose: bool = False) -> None:
    """Route package log records to stderr. WARNING and up by default, DEBUG with ``verbose``.

    Only the package logger is touched; repeated calls replace the handler
    installed by the previous call.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
