"""
Module: detailing_engines.job_incentives
Responsibility:
    Evaluate every invoiced job on its own for the referral commission and
    the tiered premium-service bonus (ceramic/graphene or polish).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Referral: the single referrer receives ``total * referral_rate``; it
      is never split across the job's crew.
    - Premium: ceramic/graphene is checked first and excludes polish on the
      same job.  The bonus is split equally across the job's distinct
      assigned staff.
    - Service ids missing from the catalog are skipped, never raised.

Failure modes:
    - None.  A job with no assigned staff simply pays no premium bonus.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from detailing_engines.participants import ParticipantSet, split_equally
from detailing_engines.rules import DEFAULT_RULES, AmountTier, IncentiveRules
from detailing_engines.tracer import traced_engine
from detailing_kernel.domain.dtos import JobRecord, ServiceCatalogEntry
from detailing_kernel.logging_config import get_logger

logger = get_logger("engines.job_incentives")

ZERO = Decimal("0")


class PremiumKind(str, Enum):
    """Premium category a job qualifies for."""

    NONE = "none"
    CERAMIC = "ceramic"
    POLISH = "polish"


@dataclass(frozen=True)
class JobIncentive:
    """Resolved incentives for one job."""

    job_id: str
    referrer_id: str | None
    referral_amount: Decimal
    premium_kind: PremiumKind
    premium_bonus: Decimal
    premium_staff: tuple[str, ...] = ()


@dataclass(frozen=True)
class JobIncentiveResult:
    referral: dict[str, Decimal] = field(default_factory=dict)
    premium: dict[str, Decimal] = field(default_factory=dict)
    jobs: tuple[JobIncentive, ...] = ()


def build_catalog_index(
    services: Iterable[ServiceCatalogEntry],
) -> dict[str, ServiceCatalogEntry]:
    """Service catalog keyed by id."""
    return {s.id: s for s in services}


def resolve_services(
    job: JobRecord,
    catalog: Mapping[str, ServiceCatalogEntry],
) -> tuple[ServiceCatalogEntry, ...]:
    """Catalog entries for the job's service ids; unknown ids are dropped."""
    return tuple(catalog[sid] for sid in job.service_ids if sid in catalog)


def is_ceramic_service(service: ServiceCatalogEntry, rules: IncentiveRules = DEFAULT_RULES) -> bool:
    name = service.name.lower()
    sku = service.sku.lower()
    return any(k.lower() in name or k.lower() in sku for k in rules.ceramic_keywords)


def is_polish_service(service: ServiceCatalogEntry, rules: IncentiveRules = DEFAULT_RULES) -> bool:
    return rules.polish_keyword.lower() in service.name.lower() or rules.polish_sku_marker in service.sku


def classify_premium(
    services: Sequence[ServiceCatalogEntry],
    rules: IncentiveRules = DEFAULT_RULES,
) -> PremiumKind:
    if any(is_ceramic_service(s, rules) for s in services):
        return PremiumKind.CERAMIC
    if any(is_polish_service(s, rules) for s in services):
        return PremiumKind.POLISH
    return PremiumKind.NONE


def _tier_bonus(total: Decimal, tiers: Sequence[AmountTier]) -> Decimal:
    for tier in tiers[:-1]:
        if total >= tier.min_total:
            return tier.bonus
    return tiers[-1].bonus


def premium_bonus(
    kind: PremiumKind,
    total: Decimal,
    rules: IncentiveRules = DEFAULT_RULES,
) -> Decimal:
    """
    Bonus for a premium job of the given billed total.

    Ceramic/graphene: 6000 at 30000 and above, else 4000.
    Polish: 600 at 6000+, 400 at 2500+, 200 otherwise.  Totals between
    2000 and 2499 pay 200; that gap is kept as the shop has always paid it.
    """
    if kind is PremiumKind.CERAMIC:
        return _tier_bonus(total, rules.ceramic_tiers)
    if kind is PremiumKind.POLISH:
        return _tier_bonus(total, rules.polish_tiers)
    return ZERO


@traced_engine("job_incentives", "1.0", fingerprint_fields=("jobs",))
def resolve_job_incentives(
    *,
    jobs: Sequence[JobRecord],
    services: Iterable[ServiceCatalogEntry],
    rules: IncentiveRules = DEFAULT_RULES,
) -> JobIncentiveResult:
    """
    Referral commission and premium bonus for each of the month's jobs.

    Preconditions:
        ``jobs`` are the month's INVOICED jobs.
    Postconditions:
        ``referral`` and ``premium`` map staff id to the summed credit.
    """
    catalog = build_catalog_index(services)
    referral: defaultdict[str, Decimal] = defaultdict(Decimal)
    premium: defaultdict[str, Decimal] = defaultdict(Decimal)
    resolved: list[JobIncentive] = []

    for job in jobs:
        referral_amount = ZERO
        if job.referred_by_staff_id:
            referral_amount = job.total * rules.referral_rate
            referral[job.referred_by_staff_id] += referral_amount

        kind = classify_premium(resolve_services(job, catalog), rules)
        bonus = premium_bonus(kind, job.total, rules)
        crew = ParticipantSet(job.assigned_staff_ids)
        for staff_id, share in split_equally(bonus, crew).items():
            premium[staff_id] += share

        if bonus:
            logger.debug(
                "premium_bonus_resolved",
                extra={
                    "job_id": job.id,
                    "premium_kind": kind.value,
                    "job_total": str(job.total),
                    "bonus": str(bonus),
                    "crew_size": len(crew),
                },
            )

        resolved.append(
            JobIncentive(
                job_id=job.id,
                referrer_id=job.referred_by_staff_id or None,
                referral_amount=referral_amount,
                premium_kind=kind,
                premium_bonus=bonus,
                premium_staff=tuple(crew) if bonus else (),
            )
        )

    return JobIncentiveResult(
        referral=dict(referral),
        premium=dict(premium),
        jobs=tuple(resolved),
    )
