"""Behavioural tests for call verification using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenarios

from tests.steps import *  # noqa: F403 - re-export pytest-bdd steps

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"

scenarios(str(FEATURES_DIR / "verification.feature"))
