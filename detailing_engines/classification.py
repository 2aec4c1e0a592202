"""
Module: detailing_engines.classification
Responsibility:
    Pure predicates that classify a job by time-of-day (normal hours,
    evening), by day-of-week (Sunday), by vehicle class (two-wheeler) and
    by month membership.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import detailing_kernel.

Invariants enforced:
    - Lenient parsing: a missing or malformed time-in is hour 0, which is
      neither normal hours nor evening.  Strict parsing is opt-in through
      ``IncentiveRules.lenient_time_parsing``.
    - A malformed job date is never a Sunday and never in any month.

Failure modes:
    - InvalidTimeError only when ``lenient=False`` and the time is malformed.
    - InvalidMonthKeyError from ``validate_month_key``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date

from detailing_engines.rules import DEFAULT_RULES, IncentiveRules
from detailing_kernel.domain.dtos import JobRecord
from detailing_kernel.exceptions import InvalidMonthKeyError, InvalidTimeError

_HOUR_RE = re.compile(r"^\s*(\d{1,2})(?::|$)")
_MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

_SUNDAY = 6  # date.weekday()


def hour_of(time_in: str | None, *, lenient: bool = True) -> int:
    """
    Hour component (0..23) of an ``HH:MM`` time-in.

    Missing, malformed or out-of-range input yields 0 when ``lenient``;
    otherwise InvalidTimeError is raised.
    """
    match = _HOUR_RE.match(time_in) if isinstance(time_in, str) else None
    if match is not None:
        hour = int(match.group(1))
        if hour <= 23:
            return hour
    if lenient:
        return 0
    raise InvalidTimeError(time_in)


def is_evening(time_in: str | None, rules: IncentiveRules = DEFAULT_RULES) -> bool:
    """True when the job came in at or after the evening start hour."""
    return hour_of(time_in, lenient=rules.lenient_time_parsing) >= rules.evening_start_hour


def is_normal_hours(time_in: str | None, rules: IncentiveRules = DEFAULT_RULES) -> bool:
    """True inside the normal working window (09:00-17:59 by default)."""
    hour = hour_of(time_in, lenient=rules.lenient_time_parsing)
    return rules.normal_start_hour <= hour < rules.evening_start_hour


def is_sunday(date_iso: str) -> bool:
    """Calendar day-of-week of the ISO date is Sunday. Malformed dates are not."""
    try:
        return date.fromisoformat(date_iso[:10]).weekday() == _SUNDAY
    except (TypeError, ValueError):
        return False


def is_two_wheeler(vehicle_class: str, rules: IncentiveRules = DEFAULT_RULES) -> bool:
    return vehicle_class in rules.two_wheeler_classes


def validate_month_key(month: str) -> str:
    """Return ``month`` if it is a ``YYYY-MM`` key, else raise InvalidMonthKeyError."""
    if not isinstance(month, str) or not _MONTH_KEY_RE.match(month):
        raise InvalidMonthKeyError(str(month))
    return month


def in_month(date_iso: str, month: str) -> bool:
    """Month membership is a string prefix match on the ISO date."""
    return isinstance(date_iso, str) and date_iso.startswith(month)


def select_payroll_jobs(jobs: Iterable[JobRecord], month: str) -> tuple[JobRecord, ...]:
    """INVOICED jobs dated inside ``month``, in feed order."""
    return tuple(j for j in jobs if j.is_invoiced and in_month(j.date, month))
