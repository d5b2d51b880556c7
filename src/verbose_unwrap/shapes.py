"""Fallible and optional value shapes, and the unwrap protocols they satisfy.

``Ok``/``Err`` and ``Some``/``Nothing`` implement the protocols directly;
they share no base class. Any other type can opt in by providing the same
methods.
"""

from __future__ import annotations

import dataclasses
import typing
from typing import TYPE_CHECKING, NoReturn, Protocol, runtime_checkable

from verbose_unwrap.banner import (
    OPTION_NONE,
    RESULT_ERR,
    RESULT_OK,
    UNWRAP,
    UNWRAP_ERR,
    fail,
)

if TYPE_CHECKING:
    from verbose_unwrap.callsite import CallSite

__all__ = [
    "NOTHING",
    "Err",
    "Nothing",
    "Ok",
    "Option",
    "Result",
    "Some",
    "VerboseUnwrap",
    "VerboseUnwrapErr",
]

T = typing.TypeVar("T")
E = typing.TypeVar("E")


@runtime_checkable
class VerboseUnwrap(Protocol[T]):
    """A value that yields its payload or aborts with a diagnostic."""

    def verbose_unwrap(self, message: str | None, site: CallSite) -> T:
        """Return the success payload, or print the banner and abort."""
        ...


@runtime_checkable
class VerboseUnwrapErr(Protocol[E]):
    """A fallible value whose failure payload can be extracted."""

    def verbose_unwrap_err(self, message: str | None, site: CallSite) -> E:
        """Return the failure payload, or print the banner and abort."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class Ok(typing.Generic[T]):
    """The success variant of a fallible value."""

    value: T

    def verbose_unwrap(self, message: str | None, site: CallSite) -> T:
        return self.value

    def verbose_unwrap_err(self, message: str | None, site: CallSite) -> NoReturn:
        fail(UNWRAP_ERR, RESULT_OK, site, message, self.value)


@dataclasses.dataclass(frozen=True, slots=True)
class Err(typing.Generic[E]):
    """The failure variant of a fallible value."""

    error: E

    def verbose_unwrap(self, message: str | None, site: CallSite) -> NoReturn:
        fail(UNWRAP, RESULT_ERR, site, message, self.error)

    def verbose_unwrap_err(self, message: str | None, site: CallSite) -> E:
        return self.error


@dataclasses.dataclass(frozen=True, slots=True)
class Some(typing.Generic[T]):
    """The present variant of an optional value."""

    value: T

    def verbose_unwrap(self, message: str | None, site: CallSite) -> T:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Nothing:
    """The absent variant of an optional value. Bare ``None`` behaves the same."""

    def verbose_unwrap(self, message: str | None, site: CallSite) -> NoReturn:
        fail(UNWRAP, OPTION_NONE, site, message)


NOTHING = Nothing()

Result = Ok[T] | Err[E]
Option = Some[T] | Nothing | None
