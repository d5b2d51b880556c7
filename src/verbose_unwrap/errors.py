"""Exception hierarchy for verbose_unwrap.

These exceptions signal programming or configuration mistakes. A failed
unwrap never raises: it prints its banner and aborts the process.
"""

from __future__ import annotations


class VerboseUnwrapError(Exception):
    """Base exception for all verbose_unwrap errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(VerboseUnwrapError):
    """Settings validation or resolution failed."""


class InternalError(VerboseUnwrapError):
    """An invariant of the diagnostic machinery was violated."""


class UnsupportedShapeError(VerboseUnwrapError, TypeError):
    """The value does not implement the requested unwrap operation.

    Raised by ``unwrap_err`` for optional values and plain objects, which
    have no failure payload to extract.
    """

    def __init__(
        self, message: str, *, hint: str | None = None, shape: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.shape = shape
