"""Call-site metadata shown on the banner's location line."""

from __future__ import annotations

import dataclasses
import itertools
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import FrameType

__all__ = ["CallSite"]


@dataclasses.dataclass(frozen=True, slots=True)
class CallSite:
    """Where an unwrap was called from.

    The values are display text only; nothing here is validated.
    """

    scope: str
    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line},{self.column} in {self.scope}"

    @classmethod
    def from_frame(cls, frame: FrameType) -> CallSite:
        """Describe the call expression currently executing in ``frame``.

        Line and column point at the start of the expression (column is
        1-based). Without position info the frame's line and column 1 are
        used.
        """
        code = frame.f_code
        line = frame.f_lineno
        column = 1
        if frame.f_lasti >= 0:
            positions = next(
                itertools.islice(code.co_positions(), frame.f_lasti // 2, None),
                None,
            )
            if positions is not None:
                start_line, _end_line, start_col, _end_col = positions
                if start_line is not None:
                    line = start_line
                if start_col is not None:
                    column = start_col + 1

        module = frame.f_globals.get("__name__") or "<unknown>"
        qualname = code.co_qualname
        scope = module if qualname == "<module>" else f"{module}.{qualname}"
        return cls(scope=scope, file=code.co_filename, line=line, column=column)

    @classmethod
    def capture(cls, depth: int = 0) -> CallSite:
        """Capture the site ``depth`` frames above the caller of ``capture``."""
        return cls.from_frame(sys._getframe(depth + 1))  # noqa: SLF001
