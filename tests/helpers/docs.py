"""Helpers for validating documentation content in tests."""

from __future__ import annotations

import re


def extract_marked_block(text: str, *, name: str) -> str:
    """Return the markdown enclosed by ``<!-- name:start -->`` and ``:end`` markers.

    Raises
    ------
    ValueError
        If the block is missing, duplicated or its markers are out of order.
    """
    start_marker = f"<!-- {name}:start -->"
    end_marker = f"<!-- {name}:end -->"
    for marker in (start_marker, end_marker):
        count = text.count(marker)
        if count != 1:
            msg = f"Expected exactly one {marker} marker; found {count}."
            raise ValueError(msg)

    pattern = re.compile(
        f"{re.escape(start_marker)}(?P<body>.*){re.escape(end_marker)}", re.DOTALL
    )
    match = pattern.search(text)
    if match is None:
        msg = f"Markers are out of order for {name!r}."
        raise ValueError(msg)
    return match.group("body")


def backticked_names(block: str) -> set[str]:
    """Return every identifier written in single backticks within *block*."""
    return set(re.findall(r"`([A-Za-z_][A-Za-z0-9_]*)`", block))
