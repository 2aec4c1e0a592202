"""ORM round-trip tests for the payroll module.

Verifies that every payroll ORM model can be persisted, queried back with
correct field values, and that unique constraints are enforced by the
database.

Models under test (4):
    StaffModel, DeductionModel, PayrollRunModel, ExpenseTransactionModel
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from detailing_engines import PayrollLineItem
from detailing_kernel.domain.dtos import DeductionRecord, StaffMember, StaffRole
from detailing_modules.payroll.models import ExpenseTransaction, PayrollRun, TransactionType
from detailing_modules.payroll.orm import (
    DeductionModel,
    ExpenseTransactionModel,
    PayrollRunModel,
    StaffModel,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_staff(session, test_actor_id, **overrides):
    """Create and flush a StaffModel with sensible defaults."""
    defaults = dict(
        staff_code=f"S-{uuid4().hex[:6]}",
        name="Ravi",
        role=StaffRole.DETAILER.value,
        base_salary=Decimal("12000.00"),
        current_advance=Decimal("0"),
        loan_balance=Decimal("0"),
        is_active=True,
        created_by_id=test_actor_id,
    )
    defaults.update(overrides)
    obj = StaffModel(**defaults)
    session.add(obj)
    session.flush()
    return obj


def _make_deduction(session, test_actor_id, **overrides):
    defaults = dict(
        month="2024-06",
        staff_code="S1",
        late_fine=Decimal("100.00"),
        leave_fine=Decimal("0"),
        advance_recovery=Decimal("500.00"),
        loan_emi=Decimal("0"),
        other=Decimal("0"),
        created_by_id=test_actor_id,
    )
    defaults.update(overrides)
    obj = DeductionModel(**defaults)
    session.add(obj)
    session.flush()
    return obj


def _line_item(staff_id="S1", evening="25", divisor=3):
    share = Decimal(evening) / divisor
    return PayrollLineItem(
        staff_id=staff_id,
        staff_name="Ravi",
        role=StaffRole.DETAILER,
        base_salary=Decimal("12000"),
        daily_limit_incentive=Decimal("0"),
        evening_limit_incentive=share,
        evening_profit_share=Decimal("40") / divisor,
        sunday_profit_share=Decimal("0"),
        referral_commission=Decimal("250"),
        premium_incentive=Decimal("6000"),
        washing_pool_share=Decimal("40"),
        shift_bonus=Decimal("0"),
        evening_days=1,
        deductions=DeductionRecord(staff_id, late_fine=Decimal("12.5")),
    )


# ---------------------------------------------------------------------------
# StaffModel
# ---------------------------------------------------------------------------

class TestStaffModelORM:

    def test_create_and_query(self, session, test_actor_id):
        obj = _make_staff(session, test_actor_id, staff_code="S1", loan_balance=Decimal("3000"))
        queried = session.get(StaffModel, obj.id)
        assert queried is not None
        assert queried.staff_code == "S1"
        assert queried.role == "Detailer"
        assert queried.base_salary == Decimal("12000.00")
        assert queried.loan_balance == Decimal("3000")
        assert queried.is_active is True

    def test_dto_round_trip(self, session, test_actor_id):
        dto = StaffMember(
            id="S7",
            name="Meena",
            role=StaffRole.MASTER_DETAILER,
            base_salary=Decimal("18000"),
            current_advance=Decimal("1500"),
            is_active=False,
        )
        session.add(StaffModel.from_dto(dto, created_by_id=test_actor_id))
        session.flush()

        row = session.scalars(select(StaffModel).where(StaffModel.staff_code == "S7")).one()
        assert row.to_dto() == dto

    def test_staff_code_unique(self, session, test_actor_id):
        _make_staff(session, test_actor_id, staff_code="DUP")
        with pytest.raises(IntegrityError):
            _make_staff(session, test_actor_id, staff_code="DUP")


# ---------------------------------------------------------------------------
# DeductionModel
# ---------------------------------------------------------------------------

class TestDeductionModelORM:

    def test_dto_round_trip(self, session, test_actor_id):
        dto = DeductionRecord(
            "S1",
            late_fine=Decimal("50"),
            leave_fine=Decimal("200"),
            advance_recovery=Decimal("1000"),
            loan_emi=Decimal("750"),
            other=Decimal("25"),
        )
        session.add(DeductionModel.from_dto(dto, "2024-06", created_by_id=test_actor_id))
        session.flush()

        row = session.scalars(select(DeductionModel)).one()
        assert row.month == "2024-06"
        assert row.to_dto() == dto
        assert row.to_dto().total == Decimal("2025")

    def test_apply_overwrites_amounts(self, session, test_actor_id):
        row = _make_deduction(session, test_actor_id)
        row.apply(DeductionRecord("S1", loan_emi=Decimal("300")), updated_by_id=test_actor_id)
        session.flush()

        dto = session.get(DeductionModel, row.id).to_dto()
        assert dto.late_fine == Decimal("0")
        assert dto.loan_emi == Decimal("300")
        assert row.updated_by_id == test_actor_id

    def test_one_row_per_month_and_staff(self, session, test_actor_id):
        _make_deduction(session, test_actor_id, staff_code="S1", month="2024-06")
        _make_deduction(session, test_actor_id, staff_code="S1", month="2024-07")
        _make_deduction(session, test_actor_id, staff_code="S2", month="2024-06")
        with pytest.raises(IntegrityError):
            _make_deduction(session, test_actor_id, staff_code="S1", month="2024-06")


# ---------------------------------------------------------------------------
# PayrollRunModel
# ---------------------------------------------------------------------------

class TestPayrollRunModelORM:

    def _run(self, month="2024-06"):
        items = (_line_item("S1"), _line_item("S2"))
        return PayrollRun(
            month=month,
            generated_at=datetime(2024, 7, 1, 12, 0, tzinfo=UTC),
            total_amount=sum((i.net_pay for i in items), Decimal("0")),
            line_items=items,
        )

    def test_snapshot_is_exact_after_reload(self, session, test_actor_id):
        run = self._run()
        session.add(PayrollRunModel.from_dto(run, created_by_id=test_actor_id))
        session.commit()
        session.expire_all()

        restored = session.get(PayrollRunModel, run.id).to_dto()

        assert restored.id == run.id
        assert restored.month == "2024-06"
        assert restored.staff_count == 2
        assert restored.line_items == run.line_items
        assert restored.line_items[0].evening_limit_incentive == Decimal("25") / 3
        assert restored.total_amount == run.total_amount

    def test_records_store_string_amounts(self, session, test_actor_id):
        run = self._run()
        session.add(PayrollRunModel.from_dto(run, created_by_id=test_actor_id))
        session.flush()

        row = session.get(PayrollRunModel, run.id)
        assert row.staff_count == 2
        assert row.status == "finalized"
        assert row.records[0]["evening_limit_incentive"] == str(Decimal("25") / 3)
        assert row.records[0]["deductions"]["late_fine"] == "12.5"

    def test_one_run_per_month(self, session, test_actor_id):
        session.add(PayrollRunModel.from_dto(self._run(), created_by_id=test_actor_id))
        session.flush()
        session.add(PayrollRunModel.from_dto(self._run(), created_by_id=test_actor_id))
        with pytest.raises(IntegrityError):
            session.flush()


# ---------------------------------------------------------------------------
# ExpenseTransactionModel
# ---------------------------------------------------------------------------

class TestExpenseTransactionModelORM:

    def test_dto_round_trip(self, session, test_actor_id):
        reference = uuid4()
        dto = ExpenseTransaction(
            tx_date=date(2024, 7, 1),
            amount=Decimal("27515"),
            category="Labor Expense",
            method="TRANSFER",
            description="Staff Payroll Execution - 2 Employees (2024-06)",
            reference_id=reference,
        )
        session.add(ExpenseTransactionModel.from_dto(dto, created_by_id=test_actor_id))
        session.commit()
        session.expire_all()

        restored = session.get(ExpenseTransactionModel, dto.id).to_dto()
        assert restored.tx_type is TransactionType.EXPENSE
        assert restored.tx_date == date(2024, 7, 1)
        assert restored.amount == Decimal("27515")
        assert restored.reference_id == reference
        assert restored.description == dto.description
