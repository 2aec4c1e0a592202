"""
Module: detailing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface for
    higher layers (detailing_modules, detailing_config, scripts).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import detailing_kernel (and sibling engine modules).
    MUST NOT import detailing_modules or detailing_config.

Invariants enforced:
    - Purity: engines never read the clock or any store.  Everything they
      need is passed in.
    - Decimal-only arithmetic; results are not rounded.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every aggregator is traced via ``@traced_engine`` (see
    ``detailing_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records.

Usage:
    from detailing_engines import compute_payroll, IncentiveRules

    items = compute_payroll(
        jobs=jobs, staff=roster, services=catalog,
        deductions={}, month="2024-06", rules=IncentiveRules(),
    )
"""

from detailing_kernel.logging_config import get_logger

logger = get_logger("engines")

from detailing_engines.classification import (
    hour_of,
    in_month,
    is_evening,
    is_normal_hours,
    is_sunday,
    is_two_wheeler,
    select_payroll_jobs,
    validate_month_key,
)
from detailing_engines.daily_incentives import (
    DailyIncentiveResult,
    DayPoolSummary,
    aggregate_daily_incentives,
    group_jobs_by_date,
)
from detailing_engines.job_incentives import (
    JobIncentive,
    JobIncentiveResult,
    PremiumKind,
    classify_premium,
    premium_bonus,
    resolve_job_incentives,
)
from detailing_engines.monthly_incentives import (
    MonthlyIncentiveResult,
    WashingPoolResult,
    aggregate_monthly_incentives,
    compute_shift_bonuses,
    compute_washing_pool,
    shift_bonus_for,
)
from detailing_engines.participants import ParticipantSet, split_equally
from detailing_engines.payroll_assembler import (
    DEDUCTION_FIELDS,
    INCENTIVE_BUCKETS,
    PayrollLineItem,
    assemble_line_items,
)
from detailing_engines.payroll_calculator import compute_payroll
from detailing_engines.rules import (
    DEFAULT_RULES,
    AmountTier,
    IncentiveRules,
    ShiftBonusStep,
)
from detailing_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Classification
    "hour_of",
    "in_month",
    "is_evening",
    "is_normal_hours",
    "is_sunday",
    "is_two_wheeler",
    "select_payroll_jobs",
    "validate_month_key",
    # Daily
    "DailyIncentiveResult",
    "DayPoolSummary",
    "aggregate_daily_incentives",
    "group_jobs_by_date",
    # Job-level
    "JobIncentive",
    "JobIncentiveResult",
    "PremiumKind",
    "classify_premium",
    "premium_bonus",
    "resolve_job_incentives",
    # Monthly
    "MonthlyIncentiveResult",
    "WashingPoolResult",
    "aggregate_monthly_incentives",
    "compute_shift_bonuses",
    "compute_washing_pool",
    "shift_bonus_for",
    # Participants
    "ParticipantSet",
    "split_equally",
    # Assembly
    "DEDUCTION_FIELDS",
    "INCENTIVE_BUCKETS",
    "PayrollLineItem",
    "assemble_line_items",
    "compute_payroll",
    # Rules
    "DEFAULT_RULES",
    "AmountTier",
    "IncentiveRules",
    "ShiftBonusStep",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
