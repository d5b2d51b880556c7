"""Banner rendering and process termination for failed unwraps.

A failed unwrap prints a fixed-style box to stderr and aborts::

    !!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!
    !   unwrap! called on Result::Err                                                  !
    !!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!
    app/jobs.py:42,13 in app.jobs.run
    optional message

    <pretty repr of the payload>

The layout is consumed by log scrapers; keep it byte-stable.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import pprint
import sys
import traceback
from typing import TYPE_CHECKING, Final, NoReturn

from verbose_unwrap.config import default_settings, resolve_settings
from verbose_unwrap.errors import InternalError

if TYPE_CHECKING:
    from verbose_unwrap.callsite import CallSite
    from verbose_unwrap.config import Settings

__all__ = [
    "BANNER_BASE_WIDTH",
    "BORDER_GLYPH",
    "OPTION_NONE",
    "RESULT_ERR",
    "RESULT_OK",
    "UNWRAP",
    "UNWRAP_ERR",
    "DiagnosticRequest",
    "banner_width",
    "fail",
    "render_and_abort",
    "render_banner",
    "render_payload",
]

logger = logging.getLogger(__name__)

BANNER_BASE_WIDTH: Final = 84
BORDER_GLYPH: Final = "!"

# "!" + 3 spaces on the left, 1 space + "!" on the right.
_FRAME_CHARS: Final = 6
_LEFT_PAD: Final = "   "
_RIGHT_PAD: Final = " "

UNWRAP: Final = "unwrap"
UNWRAP_ERR: Final = "unwrap_err"

RESULT_ERR: Final = "Result::Err"
RESULT_OK: Final = "Result::Ok"
OPTION_NONE: Final = "Option::None"

_TRUNCATED: Final = "... [TRUNCATED]"
_PACKAGE_DIR: Final = os.path.dirname(os.path.abspath(__file__))


class _Absent:
    def __repr__(self) -> str:
        return "<absent>"


_ABSENT: Final = _Absent()


@dataclasses.dataclass(frozen=True, slots=True)
class DiagnosticRequest:
    """Everything the banner shows about one failed unwrap."""

    operation: str
    classification: str
    site: CallSite
    message: str | None = None
    rendering: str | None = None

    def __post_init__(self) -> None:
        if not self.classification:
            raise InternalError(
                "DiagnosticRequest requires a classification label",
                hint="Use one of RESULT_ERR, RESULT_OK or OPTION_NONE.",
            )

    @property
    def header(self) -> str:
        return f"{self.operation}! called on {self.classification}"


def banner_width(header: str) -> int:
    """Return the box width for ``header``, never narrower than the base."""
    return max(BANNER_BASE_WIDTH, len(header) + _FRAME_CHARS)


def render_banner(request: DiagnosticRequest) -> str:
    """Render the banner text for ``request``. Pure; every line ends in a newline."""
    header = request.header
    width = banner_width(header)
    border = BORDER_GLYPH * width
    inner = width - _FRAME_CHARS
    content = f"{BORDER_GLYPH}{_LEFT_PAD}{header:<{inner}}{_RIGHT_PAD}{BORDER_GLYPH}"

    lines = ["", border, content, border, str(request.site)]
    if request.message is not None:
        lines.append(request.message)
    if request.rendering:
        lines.extend(("", request.rendering))
    return "\n".join(lines) + "\n"


def _truncate(s: str, limit: int | None) -> str:
    return s if limit is None or len(s) <= limit else s[:limit] + _TRUNCATED


def _cause_chain(exc: BaseException) -> list[BaseException]:
    """Return the explicit or implicit causes of ``exc``, nearest first."""
    chain: list[BaseException] = []
    seen = {id(exc)}
    cur: BaseException | None = exc
    while cur is not None:
        nxt = cur.__cause__ if cur.__cause__ is not None else cur.__context__
        if cur.__suppress_context__ and cur.__cause__ is None:
            nxt = None
        if nxt is None or id(nxt) in seen:
            break
        seen.add(id(nxt))
        chain.append(nxt)
        cur = nxt
    return chain


def render_payload(
    payload: object, *, width: int = 80, limit: int | None = None
) -> str | None:
    """Return a debug rendering of ``payload``, or None if it has none.

    Exceptions are followed by one ``caused by:`` line per link of their
    cause chain. Never raises: a payload whose repr fails is simply not
    rendered.
    """
    try:
        text = pprint.pformat(payload, width=width)
        if isinstance(payload, BaseException):
            causes = [f"caused by: {cause!r}" for cause in _cause_chain(payload)]
            if causes:
                text = "\n".join((text, *causes))
        return _truncate(text, limit)
    except Exception:
        return None


def _backtrace() -> str:
    frames = [
        f
        for f in traceback.extract_stack()
        if not os.path.abspath(f.filename).startswith(_PACKAGE_DIR)
    ]
    return "stack backtrace:\n" + "".join(traceback.format_list(frames))


def _write_diagnostic(text: str) -> None:
    stream = sys.stderr if sys.stderr is not None else sys.__stderr__
    if stream is None:
        return
    try:
        stream.write(text)
        stream.flush()
    except (OSError, ValueError):
        # A closed or broken stderr must not stop the abort.
        pass


def render_and_abort(
    request: DiagnosticRequest, *, settings: Settings | None = None
) -> NoReturn:
    """Print the banner for ``request`` to stderr and abort the process.

    Termination goes through ``os.abort()``: the whole process stops with
    SIGABRT, whichever thread failed, and no ``except`` clause can intercept
    it. The header is logged at CRITICAL first so crash handlers attached to
    the ``verbose_unwrap`` logger see the reason.
    """
    settings = settings or default_settings()
    text = render_banner(request)
    if settings.backtrace:
        text += "\n" + _backtrace()
    _write_diagnostic(text)
    logger.critical("%s at %s", request.header, request.site)
    os.abort()


def fail(
    operation: str,
    classification: str,
    site: CallSite,
    message: str | None = None,
    payload: object = _ABSENT,
) -> NoReturn:
    """Build the diagnostic for a failed unwrap and abort.

    Pass ``payload`` for variants that carry one; leave it out for
    ``Option::None``.
    """
    try:
        settings = resolve_settings()
    except Exception as e:
        # The banner is still printed with default settings.
        logger.warning("Ignoring invalid unwrap settings: %s", e)
        settings = default_settings()

    rendering = None
    if payload is not _ABSENT:
        rendering = render_payload(
            payload,
            width=settings.payload_width,
            limit=settings.max_payload_chars,
        )
    request = DiagnosticRequest(
        operation=operation,
        classification=classification,
        site=site,
        message=message,
        rendering=rendering,
    )
    render_and_abort(request, settings=settings)
