"""Call interception: matching, responding, defaulting and recording."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import logging
import time
import types
import typing as t

from .errors import ConfigurationError, UnexpectedCallError
from .expectations import ResponseKind
from .verifiers import describe_call, format_sections, list_expectations

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Expectation, Response
    from .operations import Interface, Operation
    from .registry import ExpectationRegistry

logger = logging.getLogger(__name__)


class Mode(enum.StrEnum):
    """Policy for calls that match no expectation."""

    STRICT = "strict"
    LOOSE = "loose"


class DefaultValue(enum.StrEnum):
    """How loose mocks build the result of unmatched calls."""

    EMPTY = "empty"
    MOCK = "mock"


class CallState(enum.StrEnum):
    """States a single intercepted call passes through."""

    RECEIVED = "RECEIVED"
    MATCHING = "MATCHING"
    RESPONDING = "RESPONDING"
    DEFAULTING = "DEFAULTING"
    CALLING_BASE = "CALLING_BASE"
    REJECTING = "REJECTING"
    RECORDED = "RECORDED"


class CallOutcome(enum.StrEnum):
    """How an intercepted call was resolved."""

    MATCHED = "matched"
    DEFAULTED = "defaulted"
    CALLED_BASE = "called_base"
    REJECTED = "rejected"


@dc.dataclass(frozen=True, slots=True)
class InvocationRecord:
    """An observed call against a mock subject."""

    index: int
    operation: str
    args: tuple[object, ...]
    outcome: CallOutcome
    timestamp: float
    expectation: Expectation | None = dc.field(default=None, compare=False, repr=False)

    @property
    def failed(self) -> bool:
        """Return ``True`` when the call was rejected by a strict mock."""
        return self.outcome is CallOutcome.REJECTED


_EMPTY_VALUES: dict[type, t.Callable[[], object]] = {
    bool: bool,
    int: int,
    float: float,
    complex: complex,
    str: str,
    bytes: bytes,
    bytearray: bytearray,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}

_ABSTRACT_EMPTY_VALUES: tuple[tuple[type, t.Callable[[], object]], ...] = (
    (cabc.Iterator, lambda: iter(())),
    (cabc.MutableMapping, dict),
    (cabc.Mapping, dict),
    (cabc.MutableSet, set),
    (cabc.Set, frozenset),
    (cabc.MutableSequence, list),
    (cabc.Sequence, tuple),
    (cabc.Iterable, tuple),
)


def empty_value(return_type: object) -> object:
    """Return the type-appropriate empty value for *return_type*.

    Scalars get their zero value, containers an empty instance, and
    anything else (``None``, unions, unknown classes) gets ``None``.
    """
    origin = t.get_origin(return_type) or return_type
    if origin in (t.Union, types.UnionType):
        return None
    if not isinstance(origin, type):
        return None
    factory = _EMPTY_VALUES.get(origin)
    if factory is not None:
        return factory()
    for abstract, abstract_factory in _ABSTRACT_EMPTY_VALUES:
        if origin is abstract:
            return abstract_factory()
    return None


def _is_mockable_class(return_type: object) -> bool:
    if not isinstance(return_type, type) or return_type is type(None):
        return False
    if return_type in _EMPTY_VALUES or return_type.__module__ == "builtins":
        return False
    if issubclass(return_type, enum.Enum):
        return False
    return return_type.__module__ != "collections.abc"


class CallInterceptor:
    """Route calls through the registry and keep the invocation journal.

    Parameters
    ----------
    interface:
        Operations the mock subject exposes.
    registry:
        Expectations configured for the subject.
    mode:
        :class:`Mode.STRICT` rejects unmatched calls, :class:`Mode.LOOSE`
        answers them with default values.
    call_base:
        When ``True`` unmatched calls run the interface's real implementation
        instead of returning a default.
    default_value:
        :class:`DefaultValue.MOCK` makes unmatched calls returning a class
        type produce a nested loose mock.
    nested_mock_factory:
        Builds the nested mock objects for :class:`DefaultValue.MOCK`.
    name:
        Label used in log and error messages.
    """

    def __init__(  # noqa: PLR0913 - mirrors the subject's construction options
        self,
        interface: Interface,
        registry: ExpectationRegistry,
        *,
        mode: Mode = Mode.LOOSE,
        call_base: bool = False,
        default_value: DefaultValue = DefaultValue.EMPTY,
        nested_mock_factory: t.Callable[[type], object] | None = None,
        name: str = "mock",
    ) -> None:
        self.interface = interface
        self.registry = registry
        self.mode = Mode(mode)
        self.call_base = call_base
        self.default_value = DefaultValue(default_value)
        self.name = name
        self.target: object | None = None
        self._nested_mock_factory = nested_mock_factory
        self._nested_mocks: dict[str, object] = {}
        self._journal: list[InvocationRecord] = []

    @property
    def journal(self) -> tuple[InvocationRecord, ...]:
        """Return the recorded calls in the order they were received."""
        return tuple(self._journal)

    def clear(self) -> None:
        """Forget recorded calls and cached nested mocks."""
        self._journal.clear()
        self._nested_mocks.clear()

    # ------------------------------------------------------------------
    # Call handling
    # ------------------------------------------------------------------
    def invoke(
        self,
        operation: str,
        args: t.Sequence[object] = (),
        kwargs: t.Mapping[str, object] | None = None,
    ) -> t.Any:
        """Handle one call of *operation* and return its result."""
        self._log_state(CallState.RECEIVED, operation)
        op = self.interface.get(operation)
        if op is None:
            msg = f"{self.name} has no operation named {operation!r}"
            raise ConfigurationError(msg)
        bound = op.bind(args, kwargs or {})
        if op.arity is None:
            op = self.interface.fix_arity(op.name, len(bound))

        self._log_state(CallState.MATCHING, operation)
        expectation = self.registry.lookup(operation, bound)
        if expectation is not None:
            return self._respond(op, bound, expectation)
        if self.call_base and op.has_base:
            return self._call_base(op, bound, args, kwargs or {})
        if self.mode is Mode.STRICT:
            self._reject(op, bound)
        return self._default(op, bound)

    def _respond(
        self, op: Operation, args: tuple[object, ...], expectation: Expectation
    ) -> t.Any:
        self._log_state(CallState.RESPONDING, op.name)
        response = expectation.record_call()
        self._record(op, args, CallOutcome.MATCHED, expectation)
        return self._apply_response(op, args, response)

    def _apply_response(
        self, op: Operation, args: tuple[object, ...], response: Response
    ) -> t.Any:
        if response.kind is ResponseKind.VALUE:
            return response.payload
        if response.kind is ResponseKind.RAISE:
            # Shared instances start each raise with a fresh traceback.
            if isinstance(response.payload, BaseException):
                raise response.payload.with_traceback(None)
            raise response.payload
        if response.kind is ResponseKind.CALLBACK:
            return response.payload(*args)
        return self.default_for(op)

    def _call_base(
        self,
        op: Operation,
        bound: tuple[object, ...],
        args: t.Sequence[object],
        kwargs: t.Mapping[str, object],
    ) -> t.Any:
        self._log_state(CallState.CALLING_BASE, op.name)
        self._record(op, bound, CallOutcome.CALLED_BASE)
        impl = t.cast("t.Callable[..., t.Any]", op.implementation)
        return impl(self.target, *args, **kwargs)

    def _reject(self, op: Operation, args: tuple[object, ...]) -> t.NoReturn:
        self._log_state(CallState.REJECTING, op.name)
        self._record(op, args, CallOutcome.REJECTED)
        logger.warning(
            "%s rejected unexpected call %s", self.name, describe_call(op.name, args)
        )
        msg = format_sections(
            f"Unexpected call on strict mock {self.name}.",
            [
                ("Actual call", describe_call(op.name, args)),
                (
                    "Configured expectations",
                    list_expectations(self.registry.for_operation(op.name), args),
                ),
            ],
        )
        raise UnexpectedCallError(msg)

    def _default(self, op: Operation, args: tuple[object, ...]) -> t.Any:
        self._log_state(CallState.DEFAULTING, op.name)
        self._record(op, args, CallOutcome.DEFAULTED)
        return self.default_for(op)

    def _record(
        self,
        op: Operation,
        args: tuple[object, ...],
        outcome: CallOutcome,
        expectation: Expectation | None = None,
    ) -> None:
        record = InvocationRecord(
            index=len(self._journal),
            operation=op.name,
            args=args,
            outcome=outcome,
            timestamp=time.time(),
            expectation=expectation,
        )
        self._journal.append(record)
        self._log_state(CallState.RECORDED, op.name)

    def _log_state(self, state: CallState, operation: str) -> None:
        logger.debug("%s.%s -> %s", self.name, operation, state)

    # ------------------------------------------------------------------
    # Default values
    # ------------------------------------------------------------------
    def default_for(self, op: Operation) -> object:
        """Return the value an unmatched call of *op* produces in loose mode."""
        return_type = op.return_type
        if (
            self.default_value is DefaultValue.MOCK
            and self._nested_mock_factory is not None
            and _is_mockable_class(return_type)
        ):
            nested = self._nested_mocks.get(op.name)
            if nested is None:
                try:
                    nested = self._nested_mock_factory(t.cast("type", return_type))
                except (ConfigurationError, TypeError) as exc:
                    logger.debug(
                        "%s.%s cannot return a nested mock: %s", self.name, op.name, exc
                    )
                    return empty_value(return_type)
                self._nested_mocks[op.name] = nested
            return nested
        return empty_value(return_type)


__all__ = [
    "CallInterceptor",
    "CallOutcome",
    "CallState",
    "DefaultValue",
    "InvocationRecord",
    "Mode",
    "empty_value",
]
