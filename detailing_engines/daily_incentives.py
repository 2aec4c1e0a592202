"""
Module: detailing_engines.daily_incentives
Responsibility:
    Group a month's invoiced jobs by calendar date and distribute the three
    per-day pools: the daily volume bonus (normal hours), the evening piece
    rate plus evening profit share, and the Sunday profit share.  Also
    records, per staff id, the distinct dates worked in the evening, which
    the monthly shift bonus consumes.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import detailing_kernel and sibling engine modules.

Invariants enforced:
    - Every pool is split equally across the DISTINCT staff who worked a
      qualifying job that day; no weighting by job count or value.
    - Evening piece-rate and evening profit-share are independent pools
      with independent per-head shares.
    - The Sunday pool uses the whole day's revenue and every staff member
      assigned to any job that day.
    - Staff ids unknown to the roster still count in a pool's divisor;
      their credit is simply never read by the assembler.

Failure modes:
    - None for well-formed JobRecords; malformed times and dates are
      classified leniently (see classification).

Usage:
    result = aggregate_daily_incentives(jobs=month_jobs, rules=rules)
    result.daily_limit["S1"]      # Decimal credit for staff S1
    result.evening_days["S1"]     # frozenset of ISO dates
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from decimal import Decimal

from detailing_engines.classification import (
    is_evening,
    is_normal_hours,
    is_sunday,
    is_two_wheeler,
)
from detailing_engines.participants import ParticipantSet, split_equally
from detailing_engines.rules import DEFAULT_RULES, IncentiveRules
from detailing_engines.tracer import traced_engine
from detailing_kernel.domain.dtos import JobRecord
from detailing_kernel.logging_config import get_logger

logger = get_logger("engines.daily_incentives")

ZERO = Decimal("0")


@dataclass(frozen=True)
class DayPoolSummary:
    """What one calendar date contributed to each daily pool."""

    date: str
    normal_car_count: int
    normal_bike_count: int
    daily_limit_pool: Decimal
    daily_limit_staff: tuple[str, ...]
    evening_job_count: int
    evening_piece_pool: Decimal
    evening_revenue: Decimal
    evening_profit_pool: Decimal
    evening_staff: tuple[str, ...]
    is_sunday: bool
    sunday_revenue: Decimal = ZERO
    sunday_pool: Decimal = ZERO
    sunday_staff: tuple[str, ...] = ()


@dataclass(frozen=True)
class DailyIncentiveResult:
    """Per-staff credits from the daily pools, plus the per-day breakdown."""

    daily_limit: dict[str, Decimal] = field(default_factory=dict)
    evening_limit: dict[str, Decimal] = field(default_factory=dict)
    evening_profit_share: dict[str, Decimal] = field(default_factory=dict)
    sunday_profit_share: dict[str, Decimal] = field(default_factory=dict)
    evening_days: dict[str, frozenset[str]] = field(default_factory=dict)
    days: tuple[DayPoolSummary, ...] = ()

    def evening_day_count(self, staff_id: str) -> int:
        return len(self.evening_days.get(staff_id, ()))


def group_jobs_by_date(jobs: Sequence[JobRecord]) -> dict[str, list[JobRecord]]:
    """Jobs keyed by exact ISO date, dates in ascending order."""
    grouped: dict[str, list[JobRecord]] = defaultdict(list)
    for job in jobs:
        grouped[job.date].append(job)
    return {d: grouped[d] for d in sorted(grouped)}


def _credit(target: defaultdict[str, Decimal], shares: dict[str, Decimal]) -> None:
    for staff_id, amount in shares.items():
        target[staff_id] += amount


@traced_engine("daily_incentives", "1.0", fingerprint_fields=("jobs",))
def aggregate_daily_incentives(
    *,
    jobs: Sequence[JobRecord],
    rules: IncentiveRules = DEFAULT_RULES,
) -> DailyIncentiveResult:
    """
    Distribute the daily, evening and Sunday pools for a month of jobs.

    Preconditions:
        ``jobs`` are the month's INVOICED jobs (see select_payroll_jobs).
    Postconditions:
        For every date, each pool's credits sum to the pool (or nothing is
        credited when the pool is zero or nobody qualifies).
    """
    daily_limit: defaultdict[str, Decimal] = defaultdict(Decimal)
    evening_limit: defaultdict[str, Decimal] = defaultdict(Decimal)
    evening_profit: defaultdict[str, Decimal] = defaultdict(Decimal)
    sunday_profit: defaultdict[str, Decimal] = defaultdict(Decimal)
    evening_days: defaultdict[str, set[str]] = defaultdict(set)
    summaries: list[DayPoolSummary] = []

    for day, day_jobs in group_jobs_by_date(jobs).items():
        # Daily volume bonus: normal-hours jobs only
        normal_cars = 0
        normal_bikes = 0
        normal_staff = ParticipantSet()
        for job in day_jobs:
            if not is_normal_hours(job.time_in, rules):
                continue
            if is_two_wheeler(job.vehicle_class, rules):
                normal_bikes += 1
            else:
                normal_cars += 1
            normal_staff.update(job.assigned_staff_ids)

        daily_pool = ZERO
        if normal_cars > rules.daily_car_threshold:
            daily_pool += (normal_cars - rules.daily_car_threshold) * rules.daily_car_rate
        if normal_bikes > rules.daily_bike_threshold:
            daily_pool += (normal_bikes - rules.daily_bike_threshold) * rules.daily_bike_rate
        _credit(daily_limit, split_equally(daily_pool, normal_staff))

        # Evening piece rate + profit share
        piece_pool = ZERO
        evening_revenue = ZERO
        evening_count = 0
        evening_staff = ParticipantSet()
        for job in day_jobs:
            if not is_evening(job.time_in, rules):
                continue
            evening_count += 1
            if is_two_wheeler(job.vehicle_class, rules):
                piece_pool += rules.evening_bike_rate
            else:
                piece_pool += rules.evening_car_rate
            evening_revenue += job.total
            for staff_id in job.assigned_staff_ids:
                evening_staff.add(staff_id)
                evening_days[staff_id].add(day)

        evening_pool = evening_revenue * rules.profit_pool_rate
        if evening_staff:
            _credit(evening_limit, split_equally(piece_pool, evening_staff))
            _credit(evening_profit, split_equally(evening_pool, evening_staff))

        summary = DayPoolSummary(
            date=day,
            normal_car_count=normal_cars,
            normal_bike_count=normal_bikes,
            daily_limit_pool=daily_pool,
            daily_limit_staff=tuple(normal_staff),
            evening_job_count=evening_count,
            evening_piece_pool=piece_pool,
            evening_revenue=evening_revenue,
            evening_profit_pool=evening_pool,
            evening_staff=tuple(evening_staff),
            is_sunday=is_sunday(day),
        )

        # Sunday profit share: whole day, every assigned staff member
        if summary.is_sunday:
            sunday_revenue = sum((j.total for j in day_jobs), ZERO)
            sunday_pool = sunday_revenue * rules.profit_pool_rate
            sunday_staff = ParticipantSet()
            for job in day_jobs:
                sunday_staff.update(job.assigned_staff_ids)
            _credit(sunday_profit, split_equally(sunday_pool, sunday_staff))
            summary = replace(
                summary,
                sunday_revenue=sunday_revenue,
                sunday_pool=sunday_pool,
                sunday_staff=tuple(sunday_staff),
            )

        if daily_pool or evening_count or summary.is_sunday:
            logger.debug(
                "daily_pools_distributed",
                extra={
                    "date": day,
                    "normal_car_count": normal_cars,
                    "normal_bike_count": normal_bikes,
                    "daily_limit_pool": str(daily_pool),
                    "evening_piece_pool": str(piece_pool),
                    "evening_profit_pool": str(evening_pool),
                    "sunday_pool": str(summary.sunday_pool),
                },
            )
        summaries.append(summary)

    return DailyIncentiveResult(
        daily_limit=dict(daily_limit),
        evening_limit=dict(evening_limit),
        evening_profit_share=dict(evening_profit),
        sunday_profit_share=dict(sunday_profit),
        evening_days={sid: frozenset(days) for sid, days in evening_days.items()},
        days=tuple(summaries),
    )
