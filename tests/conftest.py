"""Pytest configuration and fixtures.

Provides environment isolation and an in-process stand-in for ``os.abort``
so the failure path can be observed without killing the test runner. Real
termination is covered by the subprocess tests under ``tests/integration``.
"""

from __future__ import annotations

import logging
import os

import pytest

from tests.helpers import AbortProbe

# =============================================================================
# Test Doubles
# =============================================================================


@pytest.fixture
def abort_probe(monkeypatch) -> AbortProbe:
    """Replace ``os.abort`` for the duration of one test."""
    probe = AbortProbe()
    monkeypatch.setattr(os, "abort", probe)
    return probe


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent settings resolution from reading project .env files.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    monkeypatch.setattr(
        "verbose_unwrap.config.find_dotenv", lambda *_args, **_kwargs: ""
    )


@pytest.fixture(autouse=True)
def isolate_unwrap_env(monkeypatch):
    """Clear VERBOSE_UNWRAP_* variables so tests see defaults."""
    for key in list(os.environ.keys()):
        if key.startswith("VERBOSE_UNWRAP_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_library_logging():
    """Keep DEBUG settings audits out of captured test output."""
    logging.getLogger("verbose_unwrap.config").setLevel(logging.INFO)
