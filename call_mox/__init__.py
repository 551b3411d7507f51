"""In-process mocking built around a configure-exercise-verify lifecycle.

Create a :class:`CallMox` for a collaborator's interface, configure
expectations on it, hand :attr:`CallMox.object` to the code under test and
verify the recorded calls afterwards. See ``docs/usage-guide.md`` for a tour.
"""

from __future__ import annotations

from .comparators import (
    Any,
    Contains,
    Eq,
    InRange,
    IsIn,
    Matcher,
    NotNone,
    Predicate,
    Regex,
    StartsWith,
)
from .controller import CallMox, MockFactory, ProtectedMembers
from .errors import (
    CallMoxError,
    ConfigurationError,
    EvaluationError,
    UnexpectedCallError,
    UnfulfilledExpectationError,
    VerificationError,
)
from .expectations import Expectation
from .interceptor import CallOutcome, DefaultValue, InvocationRecord, Mode
from .pytest_plugin import call_mox as call_mox_fixture
from .times import Times

__all__ = [
    "Any",
    "CallMox",
    "CallMoxError",
    "CallOutcome",
    "ConfigurationError",
    "Contains",
    "DefaultValue",
    "Eq",
    "EvaluationError",
    "Expectation",
    "InRange",
    "InvocationRecord",
    "IsIn",
    "Matcher",
    "MockFactory",
    "Mode",
    "NotNone",
    "Predicate",
    "ProtectedMembers",
    "Regex",
    "StartsWith",
    "Times",
    "UnexpectedCallError",
    "UnfulfilledExpectationError",
    "VerificationError",
    "call_mox_fixture",
]
