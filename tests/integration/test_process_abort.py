"""End-to-end checks that a failed unwrap really terminates the interpreter."""

from __future__ import annotations

import signal
import sys
import textwrap

import pytest

from tests.helpers import run_python

pytestmark = pytest.mark.integration

BORDER = "!" * 84


def _assert_aborted(returncode: int) -> None:
    assert returncode != 0
    if sys.platform != "win32":
        assert returncode == -signal.SIGABRT


def test_success_exits_normally_without_stderr() -> None:
    proc = run_python(
        "from verbose_unwrap import Ok, Some, unwrap\n"
        "print(unwrap(Ok(5)) + unwrap(Some(6)))\n"
    )

    assert proc.returncode == 0
    assert proc.stdout == "11\n"
    assert proc.stderr == ""


def test_err_prints_banner_and_aborts() -> None:
    proc = run_python(
        "from verbose_unwrap import Err, unwrap\n"
        "unwrap(Err(123))\n"
        "print('unreachable')\n"
    )

    _assert_aborted(proc.returncode)
    assert proc.stdout == ""
    assert proc.stderr.startswith(
        "\n"
        f"{BORDER}\n"
        "!   unwrap! called on Result::Err" + " " * 50 + "!\n"
        f"{BORDER}\n"
        "<string>:2,1 in __main__\n"
        "\n"
        "123\n"
    )


def test_nothing_with_message_and_no_payload_block() -> None:
    proc = run_python(
        "from verbose_unwrap import NOTHING, unwrap\n"
        "def load():\n"
        "    return unwrap(NOTHING, 'Oh no! {}', 123)\n"
        "load()\n"
    )

    _assert_aborted(proc.returncode)
    assert proc.stderr.startswith(
        "\n"
        f"{BORDER}\n"
        "!   unwrap! called on Option::None" + " " * 49 + "!\n"
        f"{BORDER}\n"
        "<string>:3,12 in __main__.load\n"
        "Oh no! 123\n"
    )
    assert "\n\n123" not in proc.stderr


def test_unwrap_err_on_ok_aborts() -> None:
    proc = run_python("from verbose_unwrap import Ok, unwrap_err\nunwrap_err(Ok(456))\n")

    _assert_aborted(proc.returncode)
    assert "!   unwrap_err! called on Result::Ok " in proc.stderr
    assert "<string>:2,1 in __main__\n\n456\n" in proc.stderr


def test_abort_is_not_caught_by_except_blocks() -> None:
    proc = run_python(
        "from verbose_unwrap import Err, unwrap\n"
        "try:\n"
        "    unwrap(Err('x'))\n"
        "except BaseException:\n"
        "    print('caught')\n"
    )

    _assert_aborted(proc.returncode)
    assert "caught" not in proc.stdout


def test_failure_in_worker_thread_terminates_the_process() -> None:
    code = textwrap.dedent(
        """
        import threading
        from verbose_unwrap import NOTHING, unwrap

        worker = threading.Thread(target=lambda: unwrap(NOTHING, "worker"))
        worker.start()
        worker.join()
        print("main thread survived")
        """
    )
    proc = run_python(code)

    _assert_aborted(proc.returncode)
    assert "main thread survived" not in proc.stdout
    assert "worker\n" in proc.stderr


def test_backtrace_from_environment() -> None:
    proc = run_python(
        "from verbose_unwrap import Err, unwrap\n"
        "def outer():\n"
        "    unwrap(Err(1))\n"
        "outer()\n",
        env={"VERBOSE_UNWRAP_BACKTRACE": "1"},
    )

    _assert_aborted(proc.returncode)
    banner_end = proc.stderr.index("\n1\n") + len("\n1\n")
    tail = proc.stderr[banner_end:]
    assert tail.startswith("\nstack backtrace:\n")
    assert ", in outer" in tail
