"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from anfops.cli.common.output import out
from anfops.core.errors import ConfigError, ValidationError

# Bad input (ids, options, auth file) exits 2; Azure and poll failures exit 1.
USAGE_ERRORS = (ValidationError, ConfigError)


def exit_code_for(exc: BaseException) -> int:
    """Return the process exit code for an error raised by a command."""
    return 2 if isinstance(exc, USAGE_ERRORS) else 1


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully with an optional informational message."""
    if msg:
        out.info(msg)
    raise typer.Exit(0)


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(
    exc: Exception, *, message: str | None = None, code: int | None = None
) -> NoReturn:
    """
    Print an error message and exit, chaining `exc`.

    The message defaults to `str(exc)` and the code to `exit_code_for(exc)`.
    """
    out.error(message if message is not None else str(exc))
    raise typer.Exit(code if code is not None else exit_code_for(exc)) from exc
