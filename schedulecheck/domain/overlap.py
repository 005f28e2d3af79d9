"""
Time interval overlap detection.

Intervals are half-open: ``[start, end)``. Two intervals that merely touch
at an endpoint (``a.end == b.start``) do not overlap, so back-to-back
bookings are always allowed.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Tuple, TypeVar


class Interval(Protocol):
    """Anything exposing comparable ``start`` and ``end`` attributes."""

    @property
    def start(self) -> Any: ...

    @property
    def end(self) -> Any: ...


IntervalT = TypeVar("IntervalT", bound=Interval)


def overlaps(a: Interval, b: Interval) -> bool:
    """Check if two half-open intervals share at least one instant."""
    return a.start < b.end and b.start < a.end


def find_overlapping_pair(
    intervals: Iterable[IntervalT],
) -> Tuple[IntervalT, IntervalT] | None:
    """
    Return the first pair of intervals that overlap, in input order.

    Returns None when all intervals are mutually disjoint.
    """
    seen: list[IntervalT] = []

    for current in intervals:
        for previous in seen:
            if overlaps(previous, current):
                return previous, current
        seen.append(current)

    return None
