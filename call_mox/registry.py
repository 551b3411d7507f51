"""Storage and lookup of configured expectations for one mock subject."""

from __future__ import annotations

import typing as t

from .errors import ConfigurationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Expectation
    from .operations import Interface


class ExpectationRegistry:
    """Configured expectations in registration order."""

    def __init__(self, interface: Interface) -> None:
        self._interface = interface
        self._expectations: list[Expectation] = []

    def register(self, expectation: Expectation, *, protected: bool = False) -> None:
        """Add *expectation* after checking it against the interface.

        Raises
        ------
        ConfigurationError
            When the operation is unknown, addressed through the wrong
            (public or protected) route, or when the matcher count differs
            from the operation's parameter count.
        """
        op = self._interface.require(expectation.operation, protected=protected)
        if op.arity is None:
            op = self._interface.fix_arity(op.name, expectation.arity)
        if expectation.arity != op.arity:
            msg = (
                f"{op.name}() takes {op.arity} argument(s) but "
                f"{expectation.arity} matcher(s) were given"
            )
            raise ConfigurationError(msg)
        self._expectations.append(expectation)

    def lookup(self, operation: str, args: t.Sequence[object]) -> Expectation | None:
        """Return the first expectation matching *operation* and *args*."""
        for expectation in self._expectations:
            if expectation.operation == operation and expectation.matches(args):
                return expectation
        return None

    def for_operation(self, operation: str) -> list[Expectation]:
        """Return the expectations configured for *operation*."""
        return [exp for exp in self._expectations if exp.operation == operation]

    @property
    def expectations(self) -> tuple[Expectation, ...]:
        """Return every expectation in registration order."""
        return tuple(self._expectations)

    def clear(self) -> None:
        """Forget all expectations."""
        self._expectations.clear()

    def __len__(self) -> int:
        """Return the number of registered expectations."""
        return len(self._expectations)


__all__ = ["ExpectationRegistry"]
