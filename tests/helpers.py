"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built. Test modules and ``conftest.py``
import from here so there is exactly one ``AbortCalled`` class.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import subprocess
import sys
from typing import NoReturn

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


class AbortCalled(BaseException):  # noqa: N818
    """Raised in place of ``os.abort()``.

    Derives from BaseException, like the real abort, so ``except Exception``
    in code under test cannot swallow it.
    """


@dataclass
class AbortProbe:
    """Callable replacement for ``os.abort`` that counts calls."""

    calls: int = 0

    def __call__(self) -> NoReturn:
        self.calls += 1
        raise AbortCalled


def run_python(
    code: str, *, env: dict[str, str] | None = None
) -> subprocess.CompletedProcess[str]:
    """Run ``code`` in a fresh interpreter with the package importable."""
    child_env = {
        k: v
        for k, v in os.environ.items()
        if not k.startswith("VERBOSE_UNWRAP_") and k != "PYTHONFAULTHANDLER"
    }
    child_env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), child_env.get("PYTHONPATH", "")) if p
    )
    child_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-c", code],
        capture_output=True,
        text=True,
        env=child_env,
        timeout=60,
        check=False,
    )
