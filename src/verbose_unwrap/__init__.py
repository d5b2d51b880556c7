"""verbose_unwrap: unwrap fallible and optional values, or abort loudly.

Public API:
    - unwrap(): Extract a success/present payload or abort with a banner
    - unwrap_err(): Extract a failure payload or abort with a banner
    - Ok, Err, Some, Nothing, NOTHING: Value shapes
    - CallSite: Location shown on the banner
    - settings_scope(): Scoped banner settings
"""

from __future__ import annotations

import logging

from verbose_unwrap.banner import (
    BANNER_BASE_WIDTH,
    DiagnosticRequest,
    render_and_abort,
    render_banner,
)
from verbose_unwrap.callsite import CallSite
from verbose_unwrap.config import Settings, resolve_settings, settings_scope
from verbose_unwrap.errors import (
    ConfigurationError,
    InternalError,
    UnsupportedShapeError,
    VerboseUnwrapError,
)
from verbose_unwrap.shapes import (
    NOTHING,
    Err,
    Nothing,
    Ok,
    Option,
    Result,
    Some,
    VerboseUnwrap,
    VerboseUnwrapErr,
)
from verbose_unwrap.unwrap import unwrap, unwrap_err, verbose_unwrap, verbose_unwrap_err

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("verbose-unwrap")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("verbose_unwrap").addHandler(logging.NullHandler())

__all__ = [
    "BANNER_BASE_WIDTH",
    "NOTHING",
    "CallSite",
    "ConfigurationError",
    "DiagnosticRequest",
    "Err",
    "InternalError",
    "Nothing",
    "Ok",
    "Option",
    "Result",
    "Settings",
    "Some",
    "UnsupportedShapeError",
    "VerboseUnwrap",
    "VerboseUnwrapErr",
    "VerboseUnwrapError",
    "render_and_abort",
    "render_banner",
    "resolve_settings",
    "settings_scope",
    "unwrap",
    "unwrap_err",
    "verbose_unwrap",
    "verbose_unwrap_err",
]
