"""Exception hierarchy raised by :mod:`call_mox`."""

from __future__ import annotations


class CallMoxError(Exception):
    """Base class for all call-mox errors."""


class ConfigurationError(CallMoxError):
    """Raised when an expectation or mock subject is set up incorrectly."""


class UnexpectedCallError(CallMoxError):
    """Raised when a strict mock receives a call no expectation matches."""


class EvaluationError(CallMoxError):
    """Raised when a predicate matcher fails while evaluating an argument."""


class VerificationError(CallMoxError, AssertionError):
    """Raised when recorded calls do not satisfy a verification."""


class UnfulfilledExpectationError(VerificationError):
    """Raised when a configured expectation was never exercised."""


__all__ = [
    "CallMoxError",
    "ConfigurationError",
    "EvaluationError",
    "UnexpectedCallError",
    "UnfulfilledExpectationError",
    "VerificationError",
]
