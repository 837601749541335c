# planboard/interval.py
from __future__ import annotations

import dataclasses
import datetime as dt
from dataclasses import dataclass
from typing import Iterator, Protocol, TypeVar


class DateSpan(Protocol):
    start: dt.date
    end: dt.date


@dataclass(frozen=True)
class Interval:
    start: dt.date
    end: dt.date   # inclusive


T = TypeVar("T")


def add_days(d: dt.date, days: int) -> dt.date:
    return d + dt.timedelta(days=int(days))


def days_between(a: dt.date, b: dt.date) -> int:
    """Signed whole days from `a` to `b` (b - a)."""
    return (b - a).days


def overlaps(a: DateSpan, b: DateSpan) -> bool:
    """Inclusive overlap test; an interval always overlaps itself.

    Inverted spans (start > end) are not rejected here; callers get
    whatever the comparison yields.
    """
    return not (a.end < b.start or a.start > b.end)


def shift(span: T, days: int) -> T:
    """Return a copy of `span` with start and end moved by `days`."""
    if not days:
        return span
    return dataclasses.replace(  # type: ignore[type-var]
        span,
        start=add_days(span.start, days),  # type: ignore[attr-defined]
        end=add_days(span.end, days),  # type: ignore[attr-defined]
    )


def duration(span: DateSpan) -> int:
    # Inclusive: a one-day span (start == end) lasts 1 day.
    return days_between(span.start, span.end) + 1


def is_inverted(span: DateSpan) -> bool:
    return span.start > span.end


def iter_days(start: dt.date, end: dt.date) -> Iterator[dt.date]:
    d = start
    while d <= end:
        yield d
        d = add_days(d, 1)


__all__ = [
    "DateSpan",
    "Interval",
    "add_days",
    "days_between",
    "duration",
    "is_inverted",
    "iter_days",
    "overlaps",
    "shift",
]
