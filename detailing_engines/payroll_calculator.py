"""
Module: detailing_engines.payroll_calculator
Responsibility:
    Top-level pure payroll function:
    ``(jobs, staff, services, deductions, month) -> PayrollLineItem[]``.
    Selects the month's invoiced jobs, runs the daily, job-level and
    monthly aggregators, then assembles line items.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Persistence and balance
    mutation belong to ``detailing_modules.payroll.service``.

Invariants enforced:
    - Deterministic: identical inputs produce equal line items.
    - Changing a deduction changes only total_deduction and net_pay of the
      affected staff member.

Failure modes:
    - InvalidMonthKeyError if ``month`` is not ``YYYY-MM``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal

from detailing_engines.classification import select_payroll_jobs, validate_month_key
from detailing_engines.daily_incentives import aggregate_daily_incentives
from detailing_engines.job_incentives import resolve_job_incentives
from detailing_engines.monthly_incentives import aggregate_monthly_incentives
from detailing_engines.payroll_assembler import PayrollLineItem, assemble_line_items
from detailing_engines.rules import DEFAULT_RULES, IncentiveRules
from detailing_engines.tracer import traced_engine
from detailing_kernel.domain.dtos import (
    DeductionRecord,
    JobRecord,
    ServiceCatalogEntry,
    StaffMember,
)
from detailing_kernel.logging_config import get_logger

logger = get_logger("engines.payroll_calculator")


@traced_engine("payroll", "1.0", fingerprint_fields=("month",))
def compute_payroll(
    *,
    jobs: Sequence[JobRecord],
    staff: Sequence[StaffMember],
    services: Sequence[ServiceCatalogEntry],
    deductions: Mapping[str, DeductionRecord] | None = None,
    month: str,
    rules: IncentiveRules = DEFAULT_RULES,
) -> tuple[PayrollLineItem, ...]:
    """
    Compute the month's payroll line items.

    Args:
        jobs: Full job feed; filtered here to INVOICED jobs in ``month``.
        staff: Roster.  Inactive members get no line item.
        services: Service catalog used for premium and washing detection.
        deductions: Per-staff deduction records; missing means all zero.
        month: ``YYYY-MM`` key.
        rules: Incentive parameters.
    """
    validate_month_key(month)
    month_jobs = select_payroll_jobs(jobs, month)

    daily = aggregate_daily_incentives(jobs=month_jobs, rules=rules)
    job_level = resolve_job_incentives(jobs=month_jobs, services=services, rules=rules)
    # Role groups for the washing pool are drawn from current staff only.
    active_staff = [m for m in staff if m.is_active]
    monthly = aggregate_monthly_incentives(
        jobs=month_jobs,
        services=services,
        staff=active_staff,
        evening_days=daily.evening_days,
        rules=rules,
    )
    items = assemble_line_items(staff, daily, job_level, monthly, deductions or {})

    logger.info(
        "payroll_computed",
        extra={
            "month": month,
            "job_count": len(month_jobs),
            "staff_count": len(items),
            "total_net_pay": str(sum((i.net_pay for i in items), Decimal("0"))),
        },
    )
    return items
