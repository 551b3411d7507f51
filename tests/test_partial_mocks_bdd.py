"""Behavioural tests for partial mocks using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps import *  # noqa: F403 - re-export pytest-bdd steps

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"


@scenario(
    str(FEATURES_DIR / "partial_mocks.feature"),
    "partial mock replaces a protected member",
)
def test_partial_mock_replaces_protected_member() -> None:
    """Configured protected members override the real hook."""
    pass


@scenario(
    str(FEATURES_DIR / "partial_mocks.feature"),
    "partial mock without expectations runs real code",
)
def test_partial_mock_runs_real_code() -> None:
    """Unconfigured operations delegate to the real implementation."""
    pass
