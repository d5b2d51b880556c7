"""Settings for the diagnostic banner.

Resolution is layered, lowest precedence first:
defaults < ``.env`` file < ``VERBOSE_UNWRAP_*`` environment < explicit
overrides < the innermost active ``settings_scope``.

Settings are resolved on the failure path only, so a successful unwrap
never touches the environment or the filesystem.
"""

from __future__ import annotations

from contextlib import contextmanager
import contextvars
import logging
import os
from typing import TYPE_CHECKING, Any

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from verbose_unwrap.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

__all__ = [
    "ENV_PREFIX",
    "Settings",
    "default_settings",
    "load_dotenv_file",
    "load_env",
    "resolve_settings",
    "settings_scope",
]

logger = logging.getLogger(__name__)

ENV_PREFIX = "VERBOSE_UNWRAP_"


class Settings(BaseModel):
    """Validated, immutable settings for rendering a diagnostic banner."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    #: Append the caller's stack after the banner.
    backtrace: bool = Field(default=False)
    #: Line width handed to ``pprint`` when rendering the payload.
    payload_width: int = Field(default=80, ge=20)
    #: Truncate payload renderings longer than this; ``None`` keeps them whole.
    max_payload_chars: int | None = Field(default=None, ge=1)


_DEFAULTS = Settings()

_SCOPE: contextvars.ContextVar[Mapping[str, Any] | None] = contextvars.ContextVar(
    "verbose_unwrap_settings_scope", default=None
)


def default_settings() -> Settings:
    """Return the built-in defaults."""
    return _DEFAULTS


def _coerce_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_value(field_name: str, value: str) -> Any:
    """Coerce a raw string by the schema's annotation for ``field_name``.

    Unknown fields and unparseable numbers pass through unchanged so the
    schema can report them.
    """
    info = Settings.model_fields.get(field_name)
    target_type = info.annotation if info is not None else None
    if target_type is bool:
        return _coerce_bool(value)
    if target_type is int:
        try:
            return int(value)
        except ValueError:
            return value
    return value


def _collect_prefixed(items: Mapping[str, str | None]) -> dict[str, Any]:
    config: dict[str, Any] = {}
    for key, value in items.items():
        if not key.startswith(ENV_PREFIX) or value is None:
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if not value.strip():
            # An empty variable means "unset", not "invalid".
            continue
        config[field_name] = _coerce_value(field_name, value)
    return config


def load_env() -> dict[str, Any]:
    """Read ``VERBOSE_UNWRAP_*`` variables from ``os.environ``."""
    return _collect_prefixed(os.environ)


def load_dotenv_file() -> dict[str, Any]:
    """Read ``VERBOSE_UNWRAP_*`` entries from the nearest ``.env`` file.

    The file is searched from the working directory upwards. The process
    environment is left untouched. An unreadable file (bad encoding, no
    permission, a vanished working directory) is skipped.
    """
    try:
        path = find_dotenv(usecwd=True)
        if not path:
            return {}
        values = dotenv_values(path)
    except Exception as e:
        logger.debug("Skipping unreadable .env file: %s", e)
        return {}
    return _collect_prefixed(values)


def resolve_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Resolve settings from all layers.

    Args:
        overrides: Programmatic values, applied above the environment.

    Returns:
        The validated ``Settings``.

    Raises:
        ConfigurationError: If any layer supplies an invalid value.
    """
    merged: dict[str, Any] = {}
    merged.update(load_dotenv_file())
    merged.update(load_env())
    merged.update(overrides or {})
    merged.update(_SCOPE.get() or {})

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        loc = err.get("loc") or ("?",)
        field = str(loc[0])
        raise ConfigurationError(
            f"Invalid setting {field!r}: {err.get('msg')}",
            hint=f"Check {ENV_PREFIX}{field.upper()} or the value passed in code.",
        ) from e

    logger.debug("Resolved unwrap settings: %s", settings)
    return settings


@contextmanager
def settings_scope(
    overrides: Mapping[str, Any] | None = None, **kwargs: object
) -> Generator[Settings]:
    """Temporarily override settings for the current context.

    Backed by a ``ContextVar``, so concurrent threads and tasks each see
    their own scope. Nested scopes merge over their parents.

    Example:
        with settings_scope(backtrace=True):
            unwrap(lookup(key))
    """
    combined = {**(_SCOPE.get() or {}), **(overrides or {}), **kwargs}
    token = _SCOPE.set(combined)
    try:
        # Validate eagerly so a bad scope fails at the ``with`` statement.
        yield resolve_settings()
    finally:
        _SCOPE.reset(token)
