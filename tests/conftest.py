"""Pytest configuration for test isolation.

``ypbank.logging_setup.configure_logging`` is process-wide and binds its
handler to whatever ``sys.stderr`` was at first call. CLI tests run the Typer
app repeatedly under ``CliRunner``, which swaps ``sys.stderr`` per
invocation, so each test starts from an unconfigured package logger.

INFO-level CLI chatter is silenced by default so assertions on stdout stay
exact; tests that care about log output set ``YPBANK_LOG_LEVEL`` themselves.
"""

from __future__ import annotations

import logging

import pytest

import ypbank.logging_setup as logging_setup


@pytest.fixture(autouse=True)
def _isolate_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("YPBANK_LOG_LEVEL", "WARNING")
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    pkg_logger = logging.getLogger("ypbank")
    saved = (list(pkg_logger.handlers), pkg_logger.level, pkg_logger.propagate)
    pkg_logger.handlers.clear()
    yield
    pkg_logger.handlers[:] = saved[0]
    pkg_logger.setLevel(saved[1])
    pkg_logger.propagate = saved[2]
