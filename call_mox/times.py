"""Call cardinality constraints used by verification."""

from __future__ import annotations

import dataclasses as dc

from ._validators import validate_call_count
from .errors import ConfigurationError


@dc.dataclass(frozen=True, slots=True)
class Times:
    """Inclusive bounds on how many times a call may have happened.

    ``high`` is ``None`` when the range is unbounded above. Build instances
    through the named constructors rather than directly.
    """

    low: int
    high: int | None

    def __post_init__(self) -> None:
        """Validate the bounds."""
        validate_call_count(self.low, name="lower bound")
        if self.high is not None:
            validate_call_count(self.high, name="upper bound")
            if self.high < self.low:
                msg = f"upper bound {self.high} is below lower bound {self.low}"
                raise ConfigurationError(msg)

    @classmethod
    def exactly(cls, count: int) -> Times:
        """Require exactly *count* calls."""
        return cls(count, count)

    @classmethod
    def once(cls) -> Times:
        """Require exactly one call."""
        return cls.exactly(1)

    @classmethod
    def never(cls) -> Times:
        """Require no calls at all."""
        return cls.exactly(0)

    @classmethod
    def at_least(cls, count: int) -> Times:
        """Require *count* calls or more."""
        return cls(count, None)

    @classmethod
    def at_least_once(cls) -> Times:
        """Require one call or more."""
        return cls.at_least(1)

    @classmethod
    def at_most(cls, count: int) -> Times:
        """Allow up to *count* calls."""
        return cls(0, count)

    @classmethod
    def at_most_once(cls) -> Times:
        """Allow zero calls or one."""
        return cls.at_most(1)

    @classmethod
    def between(cls, low: int, high: int, *, inclusive: bool = True) -> Times:
        """Require a call count between *low* and *high*.

        With ``inclusive=False`` both bounds are excluded, so
        ``between(1, 4, inclusive=False)`` accepts two or three calls.
        """
        if inclusive:
            return cls(low, high)
        validate_call_count(low, name="lower bound")
        validate_call_count(high, name="upper bound")
        if high - low < 2:
            msg = f"exclusive range ({low}, {high}) admits no call count"
            raise ConfigurationError(msg)
        return cls(low + 1, high - 1)

    def matches(self, count: int) -> bool:
        """Return ``True`` when *count* satisfies these bounds."""
        if count < self.low:
            return False
        return self.high is None or count <= self.high

    def describe(self) -> str:
        """Return a short human readable description."""
        if self.high is None:
            return f"at least {_calls(self.low)}"
        if self.low == self.high:
            return f"exactly {_calls(self.low)}"
        if self.low == 0:
            return f"at most {_calls(self.high)}"
        return f"between {self.low} and {self.high} calls"

    def __str__(self) -> str:
        """Return :meth:`describe`."""
        return self.describe()


def _calls(count: int) -> str:
    return f"{count} call" if count == 1 else f"{count} calls"


__all__ = ["Times"]
