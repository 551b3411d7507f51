"""Expectation configuration and matching for mock subjects."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as t
from collections import deque

from .comparators import Matcher, as_matcher
from .errors import ConfigurationError
from .times import Times


class ResponseKind(enum.StrEnum):
    """How a matched call produces its result."""

    VALUE = "value"
    RAISE = "raise"
    CALLBACK = "callback"
    DEFAULT = "default"


@dc.dataclass(frozen=True, slots=True)
class Response:
    """A configured reaction to a matched call."""

    kind: ResponseKind
    payload: t.Any = None

    @classmethod
    def value(cls, value: object) -> Response:
        """Return *value* from the call."""
        return cls(ResponseKind.VALUE, value)

    @classmethod
    def error(cls, exc: BaseException | type[BaseException]) -> Response:
        """Raise *exc* from the call."""
        if not _is_exception(exc):
            msg = f"raises() needs an exception instance or class, got {exc!r}"
            raise ConfigurationError(msg)
        return cls(ResponseKind.RAISE, exc)

    @classmethod
    def callback(cls, func: t.Callable[..., object]) -> Response:
        """Return ``func(*args)`` from the call."""
        if not callable(func):
            msg = f"runs() needs a callable, got {func!r}"
            raise ConfigurationError(msg)
        return cls(ResponseKind.CALLBACK, func)

    @classmethod
    def default(cls) -> Response:
        """Return the operation's default value from the call."""
        return cls(ResponseKind.DEFAULT)

    def describe(self) -> str:
        """Return a short human readable description."""
        if self.kind is ResponseKind.VALUE:
            return f"returns {self.payload!r}"
        if self.kind is ResponseKind.RAISE:
            return f"raises {self.payload!r}"
        if self.kind is ResponseKind.CALLBACK:
            name = getattr(self.payload, "__qualname__", repr(self.payload))
            return f"runs {name}"
        return "returns default"


def _is_exception(value: object) -> bool:
    if isinstance(value, BaseException):
        return True
    return isinstance(value, type) and issubclass(value, BaseException)


@dc.dataclass(slots=True, eq=False)
class Expectation:
    """A configured rule mapping an operation and argument pattern to a response.

    Expectations are created through :meth:`call_mox.CallMox.configure` and
    configured fluently::

        mox.configure("compare", Any(), Any(), Any()).returns(True)

    Until a response is configured a matched call returns the operation's
    default value.
    """

    operation: str
    matchers: list[Matcher] = dc.field(default_factory=list)
    call_count: int = 0
    required_times: Times | None = None
    _response: Response = dc.field(default_factory=Response.default)
    _sequence: deque[Response] | None = None

    @classmethod
    def build(cls, operation: str, argument_specs: t.Iterable[object]) -> Expectation:
        """Create an expectation, wrapping plain values in exact matchers."""
        return cls(operation, [as_matcher(spec) for spec in argument_specs])

    # ------------------------------------------------------------------
    # Fluent configuration
    # ------------------------------------------------------------------
    def returns(self, value: object) -> Expectation:
        """Return *value* from every matching call."""
        return self._set_response(Response.value(value))

    def raises(self, exc: BaseException | type[BaseException]) -> Expectation:
        """Raise *exc* from every matching call.

        An exception instance is shared by every call and starts each raise
        with a fresh traceback; pass a class to raise a new instance per call.
        """
        return self._set_response(Response.error(exc))

    def runs(self, func: t.Callable[..., object]) -> Expectation:
        """Compute the result by calling ``func`` with the call's arguments."""
        return self._set_response(Response.callback(func))

    def returns_in_sequence(self, *values: object) -> Expectation:
        """Return *values* one per matching call.

        Exception instances or classes in *values* are raised instead of
        returned. Once the sequence is exhausted, matching calls return the
        operation's default value.
        """
        if not values:
            msg = "returns_in_sequence() needs at least one value"
            raise ConfigurationError(msg)
        self._sequence = deque(
            Response.error(value) if _is_exception(value) else Response.value(value)
            for value in values
        )
        return self

    def verifiable(self, times: Times | None = None) -> Expectation:
        """Hold this expectation to *times* when verifying all expectations."""
        self.required_times = times if times is not None else Times.at_least_once()
        return self

    def _set_response(self, response: Response) -> Expectation:
        self._response = response
        self._sequence = None
        return self

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    @property
    def arity(self) -> int:
        """Return the number of argument matchers."""
        return len(self.matchers)

    @property
    def response(self) -> Response:
        """Return the response the next matching call would receive."""
        if self._sequence is None:
            return self._response
        return self._sequence[0] if self._sequence else Response.default()

    def matches(self, args: t.Sequence[object]) -> bool:
        """Return ``True`` if every matcher accepts its corresponding argument.

        :class:`~call_mox.errors.EvaluationError` from a predicate matcher
        propagates to the caller.
        """
        if len(args) != len(self.matchers):
            return False
        return all(
            matcher(arg) for matcher, arg in zip(self.matchers, args, strict=True)
        )

    def explain_mismatch(self, args: t.Sequence[object]) -> str:
        """Return a short explanation of why *args* do not match."""
        if len(args) != len(self.matchers):
            return f"expected {len(self.matchers)} arguments, got {len(args)}"
        for index, (matcher, arg) in enumerate(
            zip(self.matchers, args, strict=True), start=1
        ):
            if not matcher(arg):
                return f"argument {index}: expected {matcher!r}, got {arg!r}"
        return "arguments match"

    def record_call(self) -> Response:
        """Count a matching call and return the response it receives."""
        self.call_count += 1
        if self._sequence is None:
            return self._response
        if self._sequence:
            return self._sequence.popleft()
        return Response.default()

    def describe(self) -> str:
        """Return ``operation(matchers...)`` for messages."""
        args = ", ".join(repr(matcher) for matcher in self.matchers)
        return f"{self.operation}({args})"


__all__ = ["Expectation", "Response", "ResponseKind"]
