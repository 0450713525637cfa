"""Error types raised by the ANF core.

Errors fall into four families that callers may want to tell apart:

- ValidationError: rejected locally before any remote call.
- SubmissionError: the management API refused the mutation request.
- CompletionError: the request was accepted but the long-running operation
  failed (or waiting on it failed).
- ConvergenceTimeoutError: polling ran out of retries without observing the
  expected state.
"""

from __future__ import annotations


class AnfError(RuntimeError):
    """Base class for all errors raised by anfops."""


class ValidationError(AnfError, ValueError):
    """Raised when a request fails local validation."""


class ConfigError(AnfError):
    """Raised when the auth/basic-info file cannot be loaded."""


class AuthError(AnfError):
    """Raised when Azure credentials cannot be constructed."""


class SubmissionError(AnfError):
    """Raised when the management API rejects a mutation request."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"cannot {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class CompletionError(AnfError):
    """Raised when a submitted long-running operation does not complete."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"cannot get the {operation} response: {cause}")
        self.operation = operation
        self.cause = cause


class ConvergenceTimeoutError(AnfError):
    """Raised when the poller exhausts its retry budget."""

    def __init__(
        self, message: str, *, retries: int, last_error: BaseException | None = None
    ):
        super().__init__(message)
        self.retries = retries
        self.last_error = last_error
