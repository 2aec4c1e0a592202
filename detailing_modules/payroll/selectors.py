"""
Module: detailing_modules.payroll.selectors
Responsibility: Read-only queries over the payroll tables: the roster,
    the month's deduction input and finalized runs.
Architecture position: Modules > Payroll.  The "Q" side used by
    ``PayrollService`` and reporting callers.

Invariants enforced:
    - Read-only: never calls add, delete, flush or commit.
    - Returns frozen DTOs, never ORM instances.
    - Roster order is ``staff_code`` ascending, so line-item order is stable.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from detailing_kernel.domain.dtos import DeductionRecord, StaffMember
from detailing_modules.payroll.models import ExpenseTransaction, PayrollRun
from detailing_modules.payroll.orm import (
    DeductionModel,
    ExpenseTransactionModel,
    PayrollRunModel,
    StaffModel,
)


class PayrollSelector:
    """
    Read-only access to payroll state.

    The caller owns the session and its transaction scope.
    """

    def __init__(self, session: Session):
        self.session = session

    def list_staff(self, *, active_only: bool = False) -> list[StaffMember]:
        stmt = select(StaffModel).order_by(StaffModel.staff_code)
        if active_only:
            stmt = stmt.where(StaffModel.is_active.is_(True))
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def get_staff(self, staff_id: str) -> StaffMember | None:
        row = self.session.scalars(
            select(StaffModel).where(StaffModel.staff_code == staff_id)
        ).one_or_none()
        return row.to_dto() if row is not None else None

    def staff_exists(self, staff_id: str) -> bool:
        return self.get_staff(staff_id) is not None

    def get_deductions(self, month: str) -> dict[str, DeductionRecord]:
        stmt = (
            select(DeductionModel)
            .where(DeductionModel.month == month)
            .order_by(DeductionModel.staff_code)
        )
        return {row.staff_code: row.to_dto() for row in self.session.scalars(stmt)}

    def get_run(self, month: str) -> PayrollRun | None:
        row = self.session.scalars(
            select(PayrollRunModel).where(PayrollRunModel.month == month)
        ).one_or_none()
        return row.to_dto() if row is not None else None

    def is_finalized(self, month: str) -> bool:
        stmt = select(PayrollRunModel.id).where(PayrollRunModel.month == month)
        return self.session.scalars(stmt).first() is not None

    def list_runs(self) -> list[PayrollRun]:
        stmt = select(PayrollRunModel).order_by(PayrollRunModel.month)
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def list_expense_transactions(self) -> list[ExpenseTransaction]:
        stmt = select(ExpenseTransactionModel).order_by(
            ExpenseTransactionModel.tx_date, ExpenseTransactionModel.created_at
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]
