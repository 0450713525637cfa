"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from anfops.cli.common.output import console

# SDK loggers that are noisy at DEBUG (one line per HTTP header).
_QUIET_LOGGERS = ("azure.core.pipeline.policies.http_logging_policy", "azure.identity")


def configure_logging(verbose: bool = False) -> None:
    """Route log records through Rich; DEBUG for anfops when verbose."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    if verbose:
        logging.getLogger("anfops").setLevel(logging.DEBUG)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
