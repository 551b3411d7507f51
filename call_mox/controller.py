"""CallMox mock subjects, protected member access and the mock factory."""

from __future__ import annotations

import logging
import types
import typing as t

from .errors import ConfigurationError, UnfulfilledExpectationError, VerificationError
from .expectations import Expectation
from .interceptor import (
    CallInterceptor,
    DefaultValue,
    InvocationRecord,
    Mode,
)
from .operations import Interface
from .registry import ExpectationRegistry
from .verifiers import VerificationEngine

if t.TYPE_CHECKING:
    from .times import Times

logger = logging.getLogger(__name__)

_OWNER_ATTR = "__call_mox__"


class CallMox:
    """A mock subject: a stand-in object plus its expectations and journal.

    ``spec`` is the interface the stand-in implements. When given, the
    stand-in is an instance of a dynamic subclass of ``spec`` so
    ``isinstance`` checks in the code under test pass, and every instance
    method is intercepted. Without a spec, any attribute of the stand-in is
    an intercepted operation.
    """

    def __init__(  # noqa: PLR0913 - construction options mirror the interceptor
        self,
        spec: type | None = None,
        *,
        mode: Mode | str = Mode.LOOSE,
        call_base: bool = False,
        default_value: DefaultValue | str = DefaultValue.EMPTY,
        verify_on_exit: bool = True,
        name: str | None = None,
        init_args: t.Sequence[object] | None = None,
        init_kwargs: t.Mapping[str, object] | None = None,
    ) -> None:
        """Create a new mock subject.

        Parameters
        ----------
        spec:
            Class or protocol whose instance methods the stand-in exposes.
        mode:
            ``"strict"`` rejects calls no expectation matches with
            :class:`~call_mox.errors.UnexpectedCallError`; ``"loose"`` (the
            default) answers them with a default value.
        call_base:
            Turn the subject into a partial mock: unmatched calls run the
            real implementation from ``spec``.
        default_value:
            ``"empty"`` (the default) returns zero values and empty
            containers for unmatched calls; ``"mock"`` additionally returns
            nested loose mocks for class-typed results.
        verify_on_exit:
            When ``True`` (the default), leaving a ``with`` block without an
            exception runs :meth:`verify_all`.
        name:
            Label used in messages; defaults to the spec's name.
        init_args, init_kwargs:
            When either is given, ``spec.__init__`` runs on the stand-in with
            these arguments. Calls it makes on ``self`` are intercepted.
        """
        if call_base and spec is None:
            msg = "call_base=True needs a spec to delegate to"
            raise ConfigurationError(msg)
        self.name = name or (spec.__name__ if spec is not None else "mock")
        self._verify_on_exit = verify_on_exit
        self._interface = Interface(spec)
        self._registry = ExpectationRegistry(self._interface)
        self._interceptor = CallInterceptor(
            self._interface,
            self._registry,
            mode=Mode(mode),
            call_base=call_base,
            default_value=DefaultValue(default_value),
            nested_mock_factory=self._nested_mock,
            name=self.name,
        )
        self._engine = VerificationEngine(
            self._interface,
            self._registry,
            lambda: self._interceptor.journal,
            name=self.name,
        )
        self._object = _build_proxy(self)
        self._interceptor.target = self._object
        if init_args is not None or init_kwargs is not None:
            self._run_initializer(init_args or (), init_kwargs or {})

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @classmethod
    def of(cls, obj: object) -> CallMox:
        """Return the :class:`CallMox` that owns the stand-in *obj*."""
        owner = getattr(type(obj), _OWNER_ATTR, None)
        if not isinstance(owner, CallMox):
            msg = f"{obj!r} is not a call-mox stand-in"
            raise TypeError(msg)
        return owner

    @property
    def object(self) -> t.Any:
        """Return the stand-in handed to the code under test."""
        return self._object

    @property
    def spec(self) -> type | None:
        """Return the mocked interface, if any."""
        return self._interface.spec

    @property
    def mode(self) -> Mode:
        """Return the unmatched-call policy."""
        return self._interceptor.mode

    @property
    def call_base(self) -> bool:
        """Return ``True`` for partial mocks."""
        return self._interceptor.call_base

    @property
    def default_value(self) -> DefaultValue:
        """Return how unmatched calls build their result."""
        return self._interceptor.default_value

    @property
    def journal(self) -> tuple[InvocationRecord, ...]:
        """Return the recorded calls in order."""
        return self._interceptor.journal

    @property
    def expectations(self) -> tuple[Expectation, ...]:
        """Return the configured expectations in registration order."""
        return self._registry.expectations

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> CallMox:
        """Return this subject."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Verify all expectations when the block finished cleanly."""
        if exc_type is None and self._verify_on_exit:
            self.verify_all()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def configure(self, operation: str, *argument_specs: object) -> Expectation:
        """Register an expectation for a public *operation*.

        Each entry of *argument_specs* is a matcher from
        :mod:`call_mox.comparators` or a plain value matched by equality.
        Configure the response on the returned :class:`Expectation`.
        """
        return self._configure(operation, argument_specs, protected=False)

    def _configure(
        self, operation: str, argument_specs: t.Sequence[object], *, protected: bool
    ) -> Expectation:
        expectation = Expectation.build(operation, argument_specs)
        self._registry.register(expectation, protected=protected)
        logger.debug("%s configured %s", self.name, expectation.describe())
        return expectation

    def invoke(self, operation: str, *args: object, **kwargs: object) -> t.Any:
        """Call *operation* on the stand-in as the code under test would."""
        return self._interceptor.invoke(operation, args, kwargs)

    def verify(
        self,
        operation: str,
        *argument_specs: object,
        times: Times | None = None,
    ) -> None:
        """Check how often *operation* was called with matching arguments.

        *times* defaults to :meth:`Times.at_least_once
        <call_mox.times.Times.at_least_once>`.
        """
        self._engine.verify(operation, argument_specs, times)

    def verify_all(self) -> None:
        """Check that every configured expectation was exercised."""
        self._engine.verify_all()

    def verify_no_other_calls(self) -> None:
        """Check that every recorded call was covered by a verification."""
        self._engine.verify_no_other_calls()

    def protected(self) -> ProtectedMembers:
        """Return an accessor for configuring and verifying protected members."""
        return ProtectedMembers(self)

    def clear_calls(self) -> None:
        """Forget recorded calls and zero the expectations' call counts."""
        self._interceptor.clear()
        self._engine.reset()
        for expectation in self._registry.expectations:
            expectation.call_count = 0

    def reset(self) -> None:
        """Forget expectations and recorded calls."""
        self._registry.clear()
        self._interceptor.clear()
        self._engine.reset()

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"CallMox(name={self.name!r}, mode={self.mode.value!r}, "
            f"expectations={len(self._registry)}, calls={len(self.journal)})"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _nested_mock(self, typ: type) -> object:
        nested = CallMox(
            typ,
            mode=Mode.LOOSE,
            default_value=self.default_value,
            name=f"{self.name}->{typ.__name__}",
        )
        return nested.object

    def _run_initializer(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> None:
        spec = self._interface.spec
        if spec is None:
            msg = "init_args/init_kwargs need a spec whose __init__ can run"
            raise ConfigurationError(msg)
        spec.__init__(self._object, *args, **kwargs)


class ProtectedMembers:
    """Configure and verify single-underscore members of a mock subject."""

    def __init__(self, mox: CallMox) -> None:
        self._mox = mox

    def configure(self, operation: str, *argument_specs: object) -> Expectation:
        """Register an expectation for the protected *operation*."""
        return self._mox._configure(operation, argument_specs, protected=True)  # noqa: SLF001

    def verify(
        self,
        operation: str,
        *argument_specs: object,
        times: Times | None = None,
    ) -> None:
        """Check how often the protected *operation* was called."""
        self._mox._engine.verify(  # noqa: SLF001
            operation, argument_specs, times, protected=True
        )


class MockFactory:
    """Create mock subjects sharing defaults and verify them together."""

    def __init__(
        self,
        *,
        mode: Mode | str = Mode.LOOSE,
        default_value: DefaultValue | str = DefaultValue.EMPTY,
        call_base: bool = False,
    ) -> None:
        self.mode = Mode(mode)
        self.default_value = DefaultValue(default_value)
        self.call_base = call_base
        self._mocks: list[CallMox] = []

    @property
    def mocks(self) -> tuple[CallMox, ...]:
        """Return the subjects created so far."""
        return tuple(self._mocks)

    def create(self, spec: type | None = None, **options: t.Any) -> CallMox:
        """Create a subject; *options* override the factory defaults."""
        options.setdefault("mode", self.mode)
        options.setdefault("default_value", self.default_value)
        options.setdefault("call_base", self.call_base)
        options.setdefault("verify_on_exit", False)
        mox = CallMox(spec, **options)
        self._mocks.append(mox)
        return mox

    def verify_all(self) -> None:
        """Run :meth:`CallMox.verify_all` on every subject, reporting all failures."""
        failures = self._collect(CallMox.verify_all)
        if failures:
            raise UnfulfilledExpectationError("\n\n".join(failures))

    def verify_no_other_calls(self) -> None:
        """Run :meth:`CallMox.verify_no_other_calls` on every subject."""
        failures = self._collect(CallMox.verify_no_other_calls)
        if failures:
            raise VerificationError("\n\n".join(failures))

    def reset(self) -> None:
        """Reset every subject."""
        for mox in self._mocks:
            mox.reset()

    def _collect(self, check: t.Callable[[CallMox], None]) -> list[str]:
        failures: list[str] = []
        for mox in self._mocks:
            try:
                check(mox)
            except VerificationError as err:
                failures.append(str(err))
        return failures


class _DynamicStandIn:
    """Base for stand-ins without a spec; every attribute is an operation."""

    __slots__ = ()

    def __getattr__(self, name: str) -> t.Callable[..., t.Any]:
        if name.startswith("__"):
            raise AttributeError(name)
        owner = CallMox.of(self)

        def operation(*args: object, **kwargs: object) -> t.Any:
            return owner._interceptor.invoke(name, args, kwargs)  # noqa: SLF001

        operation.__name__ = name
        return operation

    def __repr__(self) -> str:
        return f"<call-mox stand-in {CallMox.of(self).name}>"


def _intercepting_method(name: str, interceptor: CallInterceptor) -> t.Any:
    def method(self: object, *args: object, **kwargs: object) -> t.Any:
        return interceptor.invoke(name, args, kwargs)

    method.__name__ = name
    return method


def _build_proxy(mox: CallMox) -> object:
    """Return a fresh stand-in instance wired to *mox*."""
    spec = mox.spec
    if spec is None:
        cls = type("DynamicStandIn", (_DynamicStandIn,), {_OWNER_ATTR: mox})
        return cls()

    interceptor = mox._interceptor  # noqa: SLF001
    namespace: dict[str, t.Any] = {
        name: _intercepting_method(name, interceptor)
        for name in mox._interface.operations  # noqa: SLF001
    }
    namespace[_OWNER_ATTR] = mox
    namespace["__repr__"] = lambda self: f"<call-mox stand-in {mox.name}>"
    namespace["__module__"] = spec.__module__
    try:
        cls = types.new_class(
            f"{spec.__name__}StandIn", (spec,), exec_body=lambda ns: ns.update(namespace)
        )
        return object.__new__(cls)
    except TypeError as exc:
        msg = f"cannot create a stand-in for {spec.__qualname__}: {exc}"
        raise ConfigurationError(msg) from exc


__all__ = ["CallMox", "MockFactory", "ProtectedMembers"]
