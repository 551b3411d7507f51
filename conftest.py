"""Global test configuration and shared fixtures."""

from __future__ import annotations

import logging
import typing as t

import pytest

pytest_plugins = ("call_mox.pytest_plugin", "pytester")


@pytest.fixture
def call_mox_debug_log(
    caplog: pytest.LogCaptureFixture,
) -> t.Generator[pytest.LogCaptureFixture, None, None]:
    """Capture call-mox DEBUG records for assertions on call state transitions."""
    with caplog.at_level(logging.DEBUG, logger="call_mox"):
        yield caplog
