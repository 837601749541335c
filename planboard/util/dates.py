# planboard/util/dates.py
from __future__ import annotations

import datetime as dt
from typing import Any, Optional


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s.strip(), "%Y-%m-%d").date()


def coerce_date(v: Any) -> Optional[dt.date]:
    """Accept a date, a datetime, or a YYYY-MM-DD string (a longer ISO string is cut to its date)."""
    if v is None:
        return None
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            return parse_date_yyyy_mm_dd(s[:10])
        except ValueError:
            return None
    return None


def format_date(d: Optional[dt.date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def months_before(d: dt.date, months: int) -> dt.date:
    """Calendar month subtraction; the day is clamped to the target month's length."""
    y = d.year
    m = d.month - int(months)
    while m < 1:
        m += 12
        y -= 1
    while m > 12:
        m -= 12
        y += 1
    last_day = (dt.date(y + (m == 12), m % 12 + 1, 1) - dt.timedelta(days=1)).day
    return dt.date(y, m, min(d.day, last_day))


def utc_iso_z_now() -> str:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
