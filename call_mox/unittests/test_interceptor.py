"""Unit tests for :mod:`call_mox.interceptor`."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import traceback
import typing as t

import pytest

from call_mox.comparators import Any, Predicate
from call_mox.errors import ConfigurationError, EvaluationError, UnexpectedCallError
from call_mox.expectations import Expectation
from call_mox.interceptor import (
    CallInterceptor,
    CallOutcome,
    CallState,
    DefaultValue,
    Mode,
    empty_value,
)
from call_mox.operations import Interface
from call_mox.registry import ExpectationRegistry
from call_mox.unittests._interfaces import Clock, OrderRepository, PriceCalculator


def _interceptor(
    spec: type | None = OrderRepository, **options: t.Any
) -> CallInterceptor:
    interface = Interface(spec)
    return CallInterceptor(interface, ExpectationRegistry(interface), **options)


def _register(interceptor: CallInterceptor, exp: Expectation) -> Expectation:
    interceptor.registry.register(exp)
    return exp


def test_matched_call_responds_counts_and_records() -> None:
    """A matching call increments the count and is journaled as matched."""
    interceptor = _interceptor()
    exp = _register(interceptor, Expectation.build("name_of", [1]).returns("ada"))

    assert interceptor.invoke("name_of", (1,)) == "ada"

    assert exp.call_count == 1
    (record,) = interceptor.journal
    assert record.operation == "name_of"
    assert record.args == (1,)
    assert record.outcome is CallOutcome.MATCHED
    assert record.expectation is exp
    assert not record.failed


def test_keyword_calls_bind_before_matching() -> None:
    """Keyword and default arguments are normalised before lookup."""
    interceptor = _interceptor()
    _register(interceptor, Expectation.build("save", [Any(), False]).returns(None))

    interceptor.invoke("save", (), {"order": object(), "flush": False})

    assert interceptor.journal[0].outcome is CallOutcome.MATCHED


def test_raise_response_is_recorded_before_raising() -> None:
    """Configured exceptions propagate after the call is journaled."""
    interceptor = _interceptor()
    _register(interceptor, Expectation.build("count", []).raises(RuntimeError("db")))

    with pytest.raises(RuntimeError, match="db"):
        interceptor.invoke("count")

    assert interceptor.journal[0].outcome is CallOutcome.MATCHED


def test_callback_response_receives_arguments() -> None:
    """Callbacks compute the result from the call's bound arguments."""
    interceptor = _interceptor()
    _register(interceptor, Expectation.build("tag", [Any(), Any()]).runs(
        lambda order_id, tags: order_id + len(tags)
    ))

    assert interceptor.invoke("tag", (10, "a", "b")) == 12


def test_strict_mode_rejects_and_records_failed_call() -> None:
    """Unmatched strict calls are journaled as rejected, then raised."""
    interceptor = _interceptor(mode=Mode.STRICT)
    _register(interceptor, Expectation.build("get", [1]))

    with pytest.raises(UnexpectedCallError) as exc:
        interceptor.invoke("get", (2,))

    message = str(exc.value)
    assert "get(2)" in message
    assert "1. get(1)" in message
    (record,) = interceptor.journal
    assert record.failed
    assert record.outcome is CallOutcome.REJECTED


@pytest.mark.parametrize(
    ("operation", "args", "expected"),
    [
        ("count", (), 0),
        ("name_of", (1,), ""),
        ("is_open", (1,), False),
        ("list_ids", (), []),
        ("totals", (), {}),
        ("get", (1,), None),
        ("save", (object(),), None),
        ("inventory", (), None),
    ],
)
def test_loose_mode_returns_type_appropriate_defaults(
    operation: str, args: tuple[object, ...], expected: object
) -> None:
    """Unmatched loose calls return the return type's empty value."""
    interceptor = _interceptor()
    assert interceptor.invoke(operation, args) == expected
    assert interceptor.journal[0].outcome is CallOutcome.DEFAULTED


def test_loose_defaults_are_fresh_containers() -> None:
    """Each defaulted call gets its own empty container."""
    interceptor = _interceptor()
    first = interceptor.invoke("list_ids")
    first.append(1)
    assert interceptor.invoke("list_ids") == []


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (float, 0.0),
        (bytes, b""),
        (tuple[int, ...], ()),
        (t.Optional[int], None),  # noqa: UP007 - exercising typing.Optional
        (int | None, None),
        (t.Any, None),
        (cabc.Mapping[str, int], {}),
        (cabc.Sequence[int], ()),
        (t.Iterable[int], ()),
        (None, None),
    ],
)
def test_empty_value(annotation: object, expected: object) -> None:
    """Scalars and containers have empty values; the rest gets ``None``."""
    assert empty_value(annotation) == expected


def test_empty_iterator_default() -> None:
    """Iterator return types default to an exhausted iterator."""
    assert list(t.cast("t.Iterator[int]", empty_value(t.Iterator[int]))) == []


def test_mock_default_value_nests_cached_loose_mocks() -> None:
    """Class-typed results become nested mocks, reused across calls."""
    built: list[type] = []

    def factory(typ: type) -> object:
        built.append(typ)
        return object()

    interceptor = _interceptor(
        default_value=DefaultValue.MOCK, nested_mock_factory=factory
    )
    first = interceptor.invoke("inventory")
    assert interceptor.invoke("inventory") is first
    assert [typ.__name__ for typ in built] == ["Inventory"]
    assert interceptor.invoke("count") == 0


def test_call_base_delegates_unmatched_calls() -> None:
    """Partial mocks run the real implementation with the target as ``self``."""
    interceptor = _interceptor(PriceCalculator, call_base=True)
    interceptor.target = PriceCalculator(vat_rate=0.5)

    assert interceptor.invoke("currency") == "EUR"
    assert interceptor.journal[0].outcome is CallOutcome.CALLED_BASE


def test_matched_calls_take_precedence_over_call_base() -> None:
    """Configured expectations still answer first on partial mocks."""
    interceptor = _interceptor(PriceCalculator, call_base=True, mode=Mode.STRICT)
    _register(interceptor, Expectation.build("currency", []).returns("USD"))
    interceptor.target = PriceCalculator()

    assert interceptor.invoke("currency") == "USD"


def test_unknown_operation_is_configuration_error() -> None:
    """Invoking an operation outside the interface is a setup mistake."""
    with pytest.raises(ConfigurationError):
        _interceptor().invoke("delete", (1,))


def test_evaluation_error_propagates_from_matching() -> None:
    """Broken predicates surface from the call itself."""
    interceptor = _interceptor()
    _register(
        interceptor, Expectation.build("get", [Predicate(lambda v: 1 / v)])
    )
    with pytest.raises(EvaluationError):
        interceptor.invoke("get", (0,))


def test_records_are_immutable_and_ordered() -> None:
    """Journal entries are frozen and indexed in call order."""
    interceptor = _interceptor()
    interceptor.invoke("count")
    interceptor.invoke("list_ids")

    first, second = interceptor.journal
    assert (first.index, second.index) == (0, 1)
    assert first.timestamp <= second.timestamp
    with pytest.raises(dc.FrozenInstanceError):
        first.operation = "other"  # type: ignore[misc]


def test_clear_forgets_journal() -> None:
    """Clearing empties the journal."""
    interceptor = _interceptor()
    interceptor.invoke("count")
    interceptor.clear()
    assert interceptor.journal == ()


def test_state_transitions_are_logged(
    call_mox_debug_log: pytest.LogCaptureFixture,
) -> None:
    """Each call logs its path through the state machine at DEBUG."""
    interceptor = _interceptor(name="repo")
    interceptor.invoke("count")

    messages = [
        rec.getMessage()
        for rec in call_mox_debug_log.records
        if rec.name == "call_mox.interceptor"
    ]
    assert messages == [
        f"repo.count -> {state}"
        for state in (
            CallState.RECEIVED,
            CallState.MATCHING,
            CallState.DEFAULTING,
            CallState.RECORDED,
        )
    ]


def test_rejections_are_logged_as_warnings(caplog: pytest.LogCaptureFixture) -> None:
    """Strict rejections leave a WARNING record."""
    interceptor = _interceptor(mode=Mode.STRICT, name="repo")
    with (
        caplog.at_level(logging.WARNING, logger="call_mox"),
        pytest.raises(UnexpectedCallError),
    ):
        interceptor.invoke("count")
    assert "repo rejected unexpected call count()" in caplog.text


def test_mock_default_value_falls_back_when_no_stand_in_can_be_built() -> None:
    """Loose calls still return a default when the nested mock cannot be made."""

    def factory(typ: type) -> object:
        msg = f"cannot create a stand-in for {typ.__name__}"
        raise ConfigurationError(msg)

    interceptor = _interceptor(
        Clock, default_value=DefaultValue.MOCK, nested_mock_factory=factory
    )
    assert interceptor.invoke("now") is None
    assert interceptor.journal[0].outcome is CallOutcome.DEFAULTED


def test_mock_default_value_skips_enums() -> None:
    """Enum return types are never handed to the nested mock factory."""
    built: list[type] = []
    interceptor = _interceptor(
        Clock, default_value=DefaultValue.MOCK, nested_mock_factory=built.append
    )
    assert interceptor.invoke("colour") is None
    assert built == []


def test_raised_instances_start_with_a_fresh_traceback() -> None:
    """A configured exception instance does not accumulate tracebacks."""
    interceptor = _interceptor()
    error = RuntimeError("db")
    _register(interceptor, Expectation.build("count", []).raises(error))

    depths = []
    for _ in range(3):
        with pytest.raises(RuntimeError) as excinfo:
            interceptor.invoke("count")
        assert excinfo.value is error
        depths.append(len(list(traceback.walk_tb(excinfo.value.__traceback__))))
    assert depths[0] == depths[1] == depths[2]


def test_strict_rejection_explains_each_mismatch() -> None:
    """Rejection messages say why each configured expectation did not match."""
    interceptor = _interceptor(mode=Mode.STRICT)
    _register(interceptor, Expectation.build("name_of", [1]))
    _register(interceptor, Expectation.build("name_of", [Any(str)]))

    with pytest.raises(UnexpectedCallError) as exc:
        interceptor.invoke("name_of", (2,))

    message = str(exc.value)
    assert "mismatch: argument 1: expected 1, got 2" in message
    assert "mismatch: argument 1: expected Any(str), got 2" in message


def test_specless_calls_fix_and_enforce_arity() -> None:
    """The first call of a spec-less operation fixes its parameter count."""
    interceptor = _interceptor(None)
    interceptor.invoke("fetch", ("a", "b"))

    assert interceptor.interface.get("fetch").arity == 2  # type: ignore[union-attr]
    with pytest.raises(TypeError, match="takes 2 positional argument"):
        interceptor.invoke("fetch", ("a",))
    with pytest.raises(ConfigurationError, match="takes 2 argument"):
        interceptor.registry.register(Expectation.build("fetch", [Any()]))
