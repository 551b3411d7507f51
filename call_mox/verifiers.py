"""Verification of recorded calls for :class:`~call_mox.CallMox`."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import ConfigurationError, UnfulfilledExpectationError, VerificationError
from .expectations import Expectation
from .times import Times

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .interceptor import InvocationRecord
    from .operations import Interface
    from .registry import ExpectationRegistry


def _format_args(args: t.Sequence[object]) -> str:
    return ", ".join(repr(arg) for arg in args)


def describe_call(operation: str, args: t.Sequence[object]) -> str:
    """Return ``operation(arg, ...)`` for messages."""
    return f"{operation}({_format_args(args)})"


def _describe_expectation(exp: Expectation, *, include_count: bool = False) -> str:
    """Return a human readable representation of *exp*."""
    lines = [exp.describe()]
    lines.append(exp.response.describe())
    if include_count:
        lines.append(f"observed calls={exp.call_count}")
    return "\n".join(lines)


def _describe_record(
    record: InvocationRecord, pattern: Expectation | None = None
) -> str:
    call = describe_call(record.operation, record.args)
    text = f"#{record.index} {call} [{record.outcome}]"
    if pattern is not None and not pattern.matches(record.args):
        text += f": {pattern.explain_mismatch(record.args)}"
    return text


def _describe_records(
    records: t.Sequence[InvocationRecord], pattern: Expectation | None = None
) -> str:
    if not records:
        return "(none)"
    return "\n".join(_describe_record(record, pattern) for record in records)


def list_expectations(
    expectations: t.Sequence[Expectation], args: t.Sequence[object] | None = None
) -> str:
    """Return a numbered listing of *expectations*.

    When *args* is given each entry also says why *args* did not match it.
    """
    entries = [_describe_expectation(exp) for exp in expectations]
    if args is not None:
        entries = [
            f"{entry}\nmismatch: {exp.explain_mismatch(args)}"
            for entry, exp in zip(entries, expectations, strict=True)
        ]
    return _numbered(entries)


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    """Return *title* followed by labelled, indented *sections*."""
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


class VerificationEngine:
    """Check recorded calls against cardinality and completeness rules.

    Verification never alters the journal or the expectations. The engine
    only remembers which records a verification has accounted for, so that
    :meth:`verify_no_other_calls` can report the rest.
    """

    def __init__(
        self,
        interface: Interface,
        registry: ExpectationRegistry,
        journal: t.Callable[[], t.Sequence[InvocationRecord]],
        *,
        name: str = "mock",
    ) -> None:
        self._interface = interface
        self._registry = registry
        self._journal = journal
        self._name = name
        self._accounted: set[int] = set()

    def reset(self) -> None:
        """Forget which records have been accounted for."""
        self._accounted.clear()

    def verify(
        self,
        operation: str,
        argument_specs: t.Sequence[object],
        times: Times | None = None,
        *,
        protected: bool = False,
    ) -> None:
        """Raise unless calls of *operation* matching *argument_specs* fit *times*.

        Raises
        ------
        ConfigurationError
            When *operation* is unknown or the matcher count differs from its
            parameter count.
        VerificationError
            When the number of matching calls does not satisfy *times*.
        """
        expected = times if times is not None else Times.at_least_once()
        op = self._interface.require(operation, protected=protected)
        pattern = Expectation.build(operation, argument_specs)
        if op.arity is not None and pattern.arity != op.arity:
            msg = (
                f"{op.name}() takes {op.arity} argument(s) but "
                f"{pattern.arity} matcher(s) were given"
            )
            raise ConfigurationError(msg)

        calls = [r for r in self._journal() if r.operation == operation]
        matching = [r for r in calls if pattern.matches(r.args)]
        if expected.matches(len(matching)):
            self._accounted.update(r.index for r in matching)
            return

        msg = format_sections(
            f"Verification failed for {self._name}.",
            [
                ("Expected", f"{pattern.describe()}\n{expected}"),
                ("Observed calls", f"{len(matching)} matching"),
                ("Recorded invocations", _describe_records(calls, pattern)),
            ],
        )
        raise VerificationError(msg)

    def verify_all(self) -> None:
        """Raise unless every configured expectation has been exercised.

        Expectations marked :meth:`~call_mox.Expectation.verifiable` with a
        cardinality are held to it; the others need at least one call.
        """
        unfulfilled = [
            exp for exp in self._registry.expectations if not _fulfilled(exp)
        ]
        if unfulfilled:
            msg = format_sections(
                f"Unfulfilled expectations on {self._name}.",
                [
                    (
                        "Expected",
                        _numbered(
                            [
                                _describe_expectation(exp, include_count=True)
                                + f"\nrequired: {_required(exp)}"
                                for exp in unfulfilled
                            ]
                        ),
                    ),
                    ("Recorded invocations", _describe_records(self._journal())),
                ],
            )
            raise UnfulfilledExpectationError(msg)
        self._accounted.update(
            record.index
            for record in self._journal()
            if record.expectation is not None
        )

    def verify_no_other_calls(self) -> None:
        """Raise if any recorded call was not accounted for by a verification."""
        others = [r for r in self._journal() if r.index not in self._accounted]
        if not others:
            return
        msg = format_sections(
            f"Unverified calls on {self._name}.",
            [("Unverified invocations", _describe_records(others))],
        )
        raise VerificationError(msg)


def _required(exp: Expectation) -> Times:
    return exp.required_times or Times.at_least_once()


def _fulfilled(exp: Expectation) -> bool:
    return _required(exp).matches(exp.call_count)


__all__ = [
    "VerificationEngine",
    "describe_call",
    "format_sections",
    "list_expectations",
]
