"""Pytest plugin providing the ``call_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .controller import MockFactory
from .interceptor import Mode

logger = logging.getLogger(__name__)

_MODE_CHOICES: tuple[str, ...] = tuple(mode.value for mode in Mode)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("call_mox")
    group.addoption(
        "--call-mox-auto-verify",
        action="store_true",
        dest="call_mox_auto_verify",
        default=None,
        help=(
            "Run verify_all() on every mock created through the call_mox "
            "fixture during teardown. Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-call-mox-auto-verify",
        action="store_false",
        dest="call_mox_auto_verify",
        default=None,
        help=(
            "Do not verify call_mox fixture mocks during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--call-mox-mode",
        action="store",
        dest="call_mox_mode",
        default=None,
        choices=_MODE_CHOICES,
        help="Default mode for mocks created by the call_mox fixture.",
    )
    parser.addini(
        "call_mox_auto_verify",
        "Run verify_all() on call_mox fixture mocks during teardown.",
        type="bool",
        default=True,
    )
    parser.addini(
        "call_mox_mode",
        "Default mode ('strict' or 'loose') for call_mox fixture mocks.",
        default=Mode.LOOSE.value,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "call_mox(auto_verify: bool = True, mode: str = 'loose'): override "
            "the call_mox fixture's teardown verification and default mode "
            "for a single test."
        ),
    )


class _CallMoxItem(t.Protocol):
    """pytest item carrying call_mox teardown metadata."""

    rep_call: pytest.TestReport


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase's report to the item so teardown can inspect it."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def _marker_kwargs(request: pytest.FixtureRequest) -> dict[str, t.Any]:
    marker = request.node.get_closest_marker("call_mox")
    if marker is None:
        return {}
    return dict(marker.kwargs)


def _auto_verify_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether the fixture verifies its mocks during teardown."""
    # Priority order: marker > fixture param > CLI option > INI setting
    marker_kwargs = _marker_kwargs(request)
    if "auto_verify" in marker_kwargs:
        return bool(marker_kwargs["auto_verify"])

    param_value = _get_param_auto_verify(request)
    if param_value is not None:
        return param_value

    config = request.config
    cli_value = config.getoption("call_mox_auto_verify")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("call_mox_auto_verify"))


def _get_param_auto_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return fixture parameter override for auto verify if present."""
    param = getattr(request, "param", None)
    if param is None:
        return None
    if isinstance(param, dict):
        if "auto_verify" in param:
            return bool(param["auto_verify"])
        keys = list(param.keys())
        msg = (
            "call_mox fixture param dict must contain 'auto_verify' key, "
            f"got keys: {keys}"
        )
        raise TypeError(msg)
    if isinstance(param, bool):
        return param
    msg = (
        "call_mox fixture param must be a bool or dict with 'auto_verify' key, "
        f"got {type(param).__name__}"
    )
    raise TypeError(msg)


def _default_mode(request: pytest.FixtureRequest) -> Mode:
    """Return the mode mocks created by the fixture start in."""
    marker_kwargs = _marker_kwargs(request)
    if "mode" in marker_kwargs:
        return _parse_mode(marker_kwargs["mode"], source="call_mox marker")

    cli_value = request.config.getoption("call_mox_mode")
    if cli_value is not None:
        return _parse_mode(cli_value, source="--call-mox-mode")

    return _parse_mode(request.config.getini("call_mox_mode"), source="call_mox_mode")


def _parse_mode(value: object, *, source: str) -> Mode:
    try:
        return Mode(str(value).strip().lower())
    except ValueError:
        msg = f"{source} must be one of {', '.join(_MODE_CHOICES)}; got {value!r}"
        raise pytest.UsageError(msg) from None


@pytest.fixture
def call_mox(request: pytest.FixtureRequest) -> t.Generator[MockFactory, None, None]:
    """Provide a :class:`MockFactory` whose mocks are verified at teardown."""
    factory = MockFactory(mode=_default_mode(request))
    auto_verify = _auto_verify_enabled(request)
    yield factory
    if auto_verify and not _call_stage_failed(request.node):
        _verify_factory(factory)


def _verify_factory(factory: MockFactory) -> None:
    """Verify *factory*'s mocks, failing the test on unmet expectations."""
    try:
        factory.verify_all()
    except AssertionError as err:
        logger.exception("Error during call_mox verification")
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(t.cast("_CallMoxItem", item), "rep_call", None)
    return bool(rep_call and rep_call.failed)
