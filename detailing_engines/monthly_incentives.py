"""
Module: detailing_engines.monthly_incentives
Responsibility:
    Month-level incentives: the evening shift bonus (step function over the
    number of distinct evening days worked) and the washing profit pool
    split between the Washer and Detailer role groups.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Shift bonus is a step function: no bonus below the lowest step.
    - Washing pool: each role group's share is split equally across that
      group.  An empty group's share is not reallocated, so the distributed
      total can be less than the pool.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from detailing_engines.job_incentives import build_catalog_index, resolve_services
from detailing_engines.participants import ParticipantSet, split_equally
from detailing_engines.rules import DEFAULT_RULES, IncentiveRules
from detailing_engines.tracer import traced_engine
from detailing_kernel.domain.dtos import JobRecord, ServiceCatalogEntry, StaffMember
from detailing_kernel.logging_config import get_logger

logger = get_logger("engines.monthly_incentives")

ZERO = Decimal("0")


@dataclass(frozen=True)
class WashingPoolResult:
    """Washing pool computation and how much of it reached anyone."""

    washing_job_count: int
    washing_revenue: Decimal
    pool: Decimal
    washer_pool: Decimal
    detailer_pool: Decimal
    washer_ids: tuple[str, ...]
    detailer_ids: tuple[str, ...]
    shares: dict[str, Decimal] = field(default_factory=dict)

    @property
    def distributed(self) -> Decimal:
        return sum(self.shares.values(), ZERO)

    @property
    def undistributed(self) -> Decimal:
        return self.pool - self.distributed


@dataclass(frozen=True)
class MonthlyIncentiveResult:
    shift_bonus: dict[str, Decimal]
    washing_pool: WashingPoolResult


def shift_bonus_for(evening_days: int, rules: IncentiveRules = DEFAULT_RULES) -> Decimal:
    """2000 for 20+ evening days, 1500 for 15+, else nothing."""
    for step in rules.shift_bonus_steps:
        if evening_days >= step.min_days:
            return step.bonus
    return ZERO


def compute_shift_bonuses(
    staff: Sequence[StaffMember],
    evening_days: Mapping[str, Iterable[str]],
    rules: IncentiveRules = DEFAULT_RULES,
) -> dict[str, Decimal]:
    return {
        member.id: shift_bonus_for(len(set(evening_days.get(member.id, ()))), rules)
        for member in staff
    }


def compute_washing_pool(
    jobs: Sequence[JobRecord],
    services: Iterable[ServiceCatalogEntry],
    staff: Sequence[StaffMember],
    rules: IncentiveRules = DEFAULT_RULES,
) -> WashingPoolResult:
    catalog = build_catalog_index(services)
    washing_jobs = [
        job for job in jobs
        if any(s.category == rules.washing_category for s in resolve_services(job, catalog))
    ]
    revenue = sum((job.total for job in washing_jobs), ZERO)
    pool = revenue * rules.profit_pool_rate
    washer_pool = pool * rules.washer_share
    detailer_pool = pool * rules.detailer_share

    washers = ParticipantSet(m.id for m in staff if m.role == rules.washer_role)
    detailers = ParticipantSet(m.id for m in staff if m.role == rules.detailer_role)

    shares: dict[str, Decimal] = {}
    for group_pool, group in ((washer_pool, washers), (detailer_pool, detailers)):
        for staff_id, share in split_equally(group_pool, group).items():
            shares[staff_id] = shares.get(staff_id, ZERO) + share

    result = WashingPoolResult(
        washing_job_count=len(washing_jobs),
        washing_revenue=revenue,
        pool=pool,
        washer_pool=washer_pool,
        detailer_pool=detailer_pool,
        washer_ids=tuple(washers),
        detailer_ids=tuple(detailers),
        shares=shares,
    )
    if pool and result.undistributed:
        logger.info(
            "washing_pool_share_undistributed",
            extra={
                "pool": str(pool),
                "undistributed": str(result.undistributed),
                "washer_count": len(washers),
                "detailer_count": len(detailers),
            },
        )
    return result


@traced_engine("monthly_incentives", "1.0", fingerprint_fields=("jobs",))
def aggregate_monthly_incentives(
    *,
    jobs: Sequence[JobRecord],
    services: Iterable[ServiceCatalogEntry],
    staff: Sequence[StaffMember],
    evening_days: Mapping[str, Iterable[str]],
    rules: IncentiveRules = DEFAULT_RULES,
) -> MonthlyIncentiveResult:
    """
    Shift bonuses for every roster member and the washing pool split.

    Preconditions:
        ``jobs`` are the month's INVOICED jobs; ``evening_days`` comes from
        the daily aggregator.
    """
    return MonthlyIncentiveResult(
        shift_bonus=compute_shift_bonuses(staff, evening_days, rules),
        washing_pool=compute_washing_pool(jobs, services, staff, rules),
    )
