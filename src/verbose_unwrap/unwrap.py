"""Entry points: ``unwrap`` and ``unwrap_err``.

``unwrap``/``unwrap_err`` capture the caller's location themselves. The
``verbose_*`` variants take an explicit ``CallSite`` for tooling that
already knows where the call came from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, overload

from verbose_unwrap.callsite import CallSite
from verbose_unwrap.errors import UnsupportedShapeError
from verbose_unwrap.shapes import NOTHING, E, T, VerboseUnwrap, VerboseUnwrapErr

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["unwrap", "unwrap_err", "verbose_unwrap", "verbose_unwrap_err"]


def _safe_repr(value: object) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _format_message(
    message: str | None, args: tuple[Any, ...], kwargs: Mapping[str, Any]
) -> str | None:
    """Expand ``message`` with ``str.format`` when arguments were given.

    A message that cannot be expanded is kept raw, followed by the
    arguments' reprs, so a bad format string never hides the banner.
    """
    if message is None or not (args or kwargs):
        return message
    try:
        return message.format(*args, **kwargs)
    except Exception:
        extras = [_safe_repr(a) for a in args]
        extras.extend(f"{k}={_safe_repr(v)}" for k, v in kwargs.items())
        return f"{message} ({', '.join(extras)})"


def verbose_unwrap(value: Any, message: str | None, site: CallSite) -> Any:
    """Return the success payload of ``value`` or abort with a banner.

    Bare ``None`` is an absent optional. Objects implementing
    ``VerboseUnwrap`` decide for themselves. Anything else is a present
    optional value and is returned as is.
    """
    if value is None:
        return NOTHING.verbose_unwrap(message, site)
    if isinstance(value, VerboseUnwrap):
        return value.verbose_unwrap(message, site)
    return value


def verbose_unwrap_err(value: Any, message: str | None, site: CallSite) -> Any:
    """Return the failure payload of ``value`` or abort with a banner.

    Raises:
        UnsupportedShapeError: ``value`` is not a fallible value.
    """
    if isinstance(value, VerboseUnwrapErr):
        return value.verbose_unwrap_err(message, site)
    shape = "None" if value is None else type(value).__name__
    raise UnsupportedShapeError(
        f"unwrap_err requires a fallible value, got {shape}",
        hint="Only Ok/Err (or types implementing verbose_unwrap_err) carry a failure payload.",
        shape=shape,
    )


@overload
def unwrap(
    value: VerboseUnwrap[T], message: str | None = None, /, *args: Any, **kwargs: Any
) -> T: ...


@overload
def unwrap(
    value: T | None, message: str | None = None, /, *args: Any, **kwargs: Any
) -> T: ...


def unwrap(value: Any, message: str | None = None, /, *args: Any, **kwargs: Any) -> Any:
    """Return the success payload of ``value`` or abort the process.

    Args:
        value: ``Ok``/``Err``, ``Some``/``Nothing``, ``None``, a plain value,
            or any object implementing ``VerboseUnwrap``.
        message: Optional note for the banner. With extra arguments it is a
            ``str.format`` template.
        *args: Positional arguments for ``message``.
        **kwargs: Keyword arguments for ``message``.

    Returns:
        The payload. On ``Err``, ``Nothing`` or ``None`` this never returns.

    Example:
        config = unwrap(load_config(path), "could not load {}", path)
    """
    return verbose_unwrap(
        value, _format_message(message, args, kwargs), CallSite.capture(1)
    )


def unwrap_err(
    value: VerboseUnwrapErr[E], message: str | None = None, /, *args: Any, **kwargs: Any
) -> E:
    """Return the failure payload of ``value`` or abort the process.

    The mirror image of ``unwrap`` for fallible values: ``Err`` yields its
    error, ``Ok`` aborts with a ``Result::Ok`` banner.

    Raises:
        UnsupportedShapeError: ``value`` is an optional or plain value.
    """
    return verbose_unwrap_err(
        value, _format_message(message, args, kwargs), CallSite.capture(1)
    )
