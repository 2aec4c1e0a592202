"""
Module: detailing_engines.payroll_assembler
Responsibility:
    Merge base salary, every incentive bucket and the month's deduction
    record into one PayrollLineItem per active staff member.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - total_evening = evening_limit_incentive + evening_profit_share
    - gross_incentives = daily_limit + total_evening + sunday_profit_share
      + premium + referral + washing_pool_share + shift_bonus
    - gross_pay = base_salary + gross_incentives
    - net_pay = gross_pay - total_deduction, with NO floor at zero.
    - Credits keyed by ids that are not on the roster are never read.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from detailing_engines.daily_incentives import DailyIncentiveResult
from detailing_engines.job_incentives import JobIncentiveResult
from detailing_engines.monthly_incentives import MonthlyIncentiveResult
from detailing_kernel.domain.dtos import DeductionRecord, StaffMember, StaffRole
from detailing_kernel.logging_config import get_logger

logger = get_logger("engines.payroll_assembler")

ZERO = Decimal("0")

INCENTIVE_BUCKETS: tuple[str, ...] = (
    "daily_limit_incentive",
    "evening_limit_incentive",
    "evening_profit_share",
    "sunday_profit_share",
    "referral_commission",
    "premium_incentive",
    "washing_pool_share",
    "shift_bonus",
)

DEDUCTION_FIELDS: tuple[str, ...] = (
    "late_fine",
    "leave_fine",
    "advance_recovery",
    "loan_emi",
    "other",
)


@dataclass(frozen=True)
class PayrollLineItem:
    """One staff member's computed pay for a month."""

    staff_id: str
    staff_name: str
    role: StaffRole
    base_salary: Decimal
    daily_limit_incentive: Decimal
    evening_limit_incentive: Decimal
    evening_profit_share: Decimal
    sunday_profit_share: Decimal
    referral_commission: Decimal
    premium_incentive: Decimal
    washing_pool_share: Decimal
    shift_bonus: Decimal
    evening_days: int
    deductions: DeductionRecord

    @property
    def total_evening(self) -> Decimal:
        return self.evening_limit_incentive + self.evening_profit_share

    @property
    def gross_incentives(self) -> Decimal:
        return sum((getattr(self, b) for b in INCENTIVE_BUCKETS), ZERO)

    @property
    def gross_pay(self) -> Decimal:
        return self.base_salary + self.gross_incentives

    @property
    def total_deduction(self) -> Decimal:
        return self.deductions.total

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.total_deduction

    def to_snapshot(self) -> dict[str, Any]:
        """Plain dict with every amount as its exact string form."""
        snapshot: dict[str, Any] = {
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "role": self.role.value,
            "base_salary": str(self.base_salary),
            "evening_days": self.evening_days,
        }
        for bucket in INCENTIVE_BUCKETS:
            snapshot[bucket] = str(getattr(self, bucket))
        snapshot["deductions"] = {
            name: str(getattr(self.deductions, name)) for name in DEDUCTION_FIELDS
        }
        snapshot["total_evening"] = str(self.total_evening)
        snapshot["gross_incentives"] = str(self.gross_incentives)
        snapshot["gross_pay"] = str(self.gross_pay)
        snapshot["total_deduction"] = str(self.total_deduction)
        snapshot["net_pay"] = str(self.net_pay)
        return snapshot

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> PayrollLineItem:
        staff_id = data["staff_id"]
        raw_deductions = data.get("deductions", {})
        deductions = DeductionRecord(
            staff_id=staff_id,
            **{name: Decimal(raw_deductions.get(name, "0")) for name in DEDUCTION_FIELDS},
        )
        return cls(
            staff_id=staff_id,
            staff_name=data["staff_name"],
            role=StaffRole(data["role"]),
            base_salary=Decimal(data["base_salary"]),
            evening_days=int(data.get("evening_days", 0)),
            deductions=deductions,
            **{bucket: Decimal(data.get(bucket, "0")) for bucket in INCENTIVE_BUCKETS},
        )


def assemble_line_items(
    staff: Sequence[StaffMember],
    daily: DailyIncentiveResult,
    job_level: JobIncentiveResult,
    monthly: MonthlyIncentiveResult,
    deductions: Mapping[str, DeductionRecord],
) -> tuple[PayrollLineItem, ...]:
    """
    Build line items for the active roster, in roster order.

    A staff member with no deduction record gets an all-zero one.
    """
    items: list[PayrollLineItem] = []
    for member in staff:
        if not member.is_active:
            continue
        sid = member.id
        item = PayrollLineItem(
            staff_id=sid,
            staff_name=member.name,
            role=member.role,
            base_salary=member.base_salary,
            daily_limit_incentive=daily.daily_limit.get(sid, ZERO),
            evening_limit_incentive=daily.evening_limit.get(sid, ZERO),
            evening_profit_share=daily.evening_profit_share.get(sid, ZERO),
            sunday_profit_share=daily.sunday_profit_share.get(sid, ZERO),
            referral_commission=job_level.referral.get(sid, ZERO),
            premium_incentive=job_level.premium.get(sid, ZERO),
            washing_pool_share=monthly.washing_pool.shares.get(sid, ZERO),
            shift_bonus=monthly.shift_bonus.get(sid, ZERO),
            evening_days=daily.evening_day_count(sid),
            deductions=deductions.get(sid) or DeductionRecord.zero(sid),
        )
        if item.net_pay < 0:
            logger.info(
                "payroll_negative_net_pay",
                extra={
                    "staff_id": sid,
                    "gross_pay": str(item.gross_pay),
                    "total_deduction": str(item.total_deduction),
                    "net_pay": str(item.net_pay),
                },
            )
        items.append(item)
    return tuple(items)
