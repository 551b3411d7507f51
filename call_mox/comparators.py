"""Argument matchers used by expectations and verifications."""

from __future__ import annotations

import re
import typing as t

from .errors import EvaluationError


class Matcher:
    """Callable returning ``True`` when a single argument value matches."""

    __slots__ = ()

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""
        raise NotImplementedError


class Eq(Matcher):
    """Match values structurally equal to ``expected``."""

    __slots__ = ("expected",)

    def __init__(self, expected: object) -> None:
        self.expected = expected

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* equals ``expected``."""
        return bool(value == self.expected)

    def __repr__(self) -> str:
        """Return the expected value's representation."""
        return repr(self.expected)


class Any(Matcher):
    """Match any value, optionally restricted to instances of ``typ``."""

    __slots__ = ("typ",)

    def __init__(self, typ: type | tuple[type, ...] | None = None) -> None:
        self.typ = typ

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input of the declared type."""
        if self.typ is None:
            return True
        return isinstance(value, self.typ)

    def __repr__(self) -> str:
        """Return a debug representation."""
        if self.typ is None:
            return "Any()"
        return f"Any({_type_name(self.typ)})"


class NotNone(Matcher):
    """Match every value except ``None``."""

    __slots__ = ()

    def __call__(self, value: object) -> bool:
        """Return ``True`` unless *value* is ``None``."""
        return value is not None

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "NotNone()"


class IsIn(Matcher):
    """Match values equal to one of ``choices``."""

    __slots__ = ("choices",)

    def __init__(self, *choices: object) -> None:
        self.choices = choices

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* is one of ``choices``."""
        return any(value == choice for choice in self.choices)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IsIn({', '.join(repr(choice) for choice in self.choices)})"


class InRange(Matcher):
    """Match values between ``low`` and ``high``."""

    __slots__ = ("high", "inclusive", "low")

    def __init__(
        self, low: t.Any, high: t.Any, *, inclusive: bool = True
    ) -> None:
        self.low = low
        self.high = high
        self.inclusive = inclusive

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* lies within the configured bounds."""
        try:
            if self.inclusive:
                return bool(self.low <= value <= self.high)
            return bool(self.low < value < self.high)
        except TypeError:
            # Values that cannot be ordered against the bounds never match.
            return False

    def __repr__(self) -> str:
        """Return a debug representation."""
        brackets = "[]" if self.inclusive else "()"
        return f"InRange{brackets[0]}{self.low!r}, {self.high!r}{brackets[1]}"


class Regex(Matcher):
    """Match strings that ``pattern`` finds a match in."""

    __slots__ = ("_pattern",)

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        self._pattern = re.compile(pattern)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*."""
        if not isinstance(value, str):
            return False
        return bool(self._pattern.search(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex({self._pattern.pattern!r})"


class Contains(Matcher):
    """Match containers holding ``item``."""

    __slots__ = ("item",)

    def __init__(self, item: object) -> None:
        self.item = item

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            return False

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contains({self.item!r})"


class StartsWith(Matcher):
    """Match strings beginning with ``prefix``."""

    __slots__ = ("prefix",)

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"StartsWith({self.prefix!r})"


class Predicate(Matcher):
    """Use a custom ``func`` to determine a match.

    Exceptions raised by ``func`` are re-raised as
    :class:`~call_mox.errors.EvaluationError` so that a broken predicate
    fails the test loudly rather than reading as a non-match.
    """

    __slots__ = ("func",)

    def __init__(self, func: t.Callable[[t.Any], object]) -> None:
        self.func = func

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        try:
            return bool(self.func(value))
        except Exception as exc:
            msg = f"Predicate {_callable_name(self.func)} raised for {value!r}: {exc}"
            raise EvaluationError(msg) from exc

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Predicate({_callable_name(self.func)})"


def as_matcher(spec: object) -> Matcher:
    """Return *spec* unchanged when it is a matcher, else wrap it in :class:`Eq`."""
    if isinstance(spec, Matcher):
        return spec
    return Eq(spec)


def _type_name(typ: type | tuple[type, ...]) -> str:
    if isinstance(typ, tuple):
        return " | ".join(item.__name__ for item in typ)
    return typ.__name__


def _callable_name(func: t.Callable[..., object]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


__all__ = [
    "Any",
    "Contains",
    "Eq",
    "InRange",
    "IsIn",
    "Matcher",
    "NotNone",
    "Predicate",
    "Regex",
    "StartsWith",
    "as_matcher",
]
