"""
Payroll ORM Persistence Models (``detailing_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the roster, the per-month deduction
    input, finalized payroll runs and the expense transactions finalize
    emits.  Each ORM class mirrors a DTO and provides ``to_dto()`` /
    ``from_dto()`` round-trip conversion.

Architecture position:
    **Modules layer** -- persistence companions to the kernel input DTOs
    and the payroll run models.  Inherits from ``TrackedBase`` (kernel DB
    base) which provides id (UUID PK), created_at, updated_at,
    created_by_id (NOT NULL UUID) and updated_by_id (nullable UUID).

Invariants enforced:
    - All monetary columns use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - One deduction row per (month, staff_code); one run row per month.
    - Run snapshots are stored as JSON with every amount as a string, so a
      finalized run reads back exactly as it was computed.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from detailing_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# StaffModel
# ---------------------------------------------------------------------------

class StaffModel(TrackedBase):
    """
    ORM model for ``StaffMember`` -- a roster entry.

    Contract:
        ``staff_code`` is the id the job feed uses in assignment and
        referral lists.  Finalize reduces ``current_advance`` and
        ``loan_balance``; they never go below zero.

    Guarantees:
        - ``staff_code`` is unique (uq_payroll_staff_code).
        - ``role`` stores the StaffRole .value string.
    """

    __tablename__ = "payroll_staff"

    staff_code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    current_advance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    loan_balance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("staff_code", name="uq_payroll_staff_code"),
        Index("idx_payroll_staff_active", "is_active"),
        Index("idx_payroll_staff_role", "role"),
    )

    def to_dto(self):
        from detailing_kernel.domain.dtos import StaffMember, StaffRole
        return StaffMember(
            id=self.staff_code,
            name=self.name,
            role=StaffRole(self.role),
            base_salary=self.base_salary,
            current_advance=self.current_advance,
            loan_balance=self.loan_balance,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "StaffModel":
        return cls(
            staff_code=dto.id,
            name=dto.name,
            role=dto.role.value if hasattr(dto.role, "value") else dto.role,
            base_salary=dto.base_salary,
            current_advance=dto.current_advance,
            loan_balance=dto.loan_balance,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<StaffModel {self.staff_code}: {self.name} ({self.role})>"


# ---------------------------------------------------------------------------
# DeductionModel
# ---------------------------------------------------------------------------

class DeductionModel(TrackedBase):
    """
    ORM model for ``DeductionRecord`` -- one staff member's deductions for
    one month.

    Contract:
        Editable only while the month is DRAFT; ``PayrollService`` checks
        the lock before writing.
    """

    __tablename__ = "payroll_deductions"

    month: Mapped[str] = mapped_column(String(7), nullable=False)
    staff_code: Mapped[str] = mapped_column(String(50), nullable=False)
    late_fine: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    leave_fine: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    advance_recovery: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    loan_emi: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    other: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("month", "staff_code", name="uq_payroll_deduction_month_staff"),
        Index("idx_payroll_deduction_month", "month"),
    )

    def to_dto(self):
        from detailing_kernel.domain.dtos import DeductionRecord
        return DeductionRecord(
            staff_id=self.staff_code,
            late_fine=self.late_fine,
            leave_fine=self.leave_fine,
            advance_recovery=self.advance_recovery,
            loan_emi=self.loan_emi,
            other=self.other,
        )

    @classmethod
    def from_dto(cls, dto, month: str, created_by_id: UUID) -> "DeductionModel":
        return cls(
            month=month,
            staff_code=dto.staff_id,
            late_fine=dto.late_fine,
            leave_fine=dto.leave_fine,
            advance_recovery=dto.advance_recovery,
            loan_emi=dto.loan_emi,
            other=dto.other,
            created_by_id=created_by_id,
        )

    def apply(self, dto, updated_by_id: UUID) -> None:
        """Overwrite the five amounts from ``dto``."""
        self.late_fine = dto.late_fine
        self.leave_fine = dto.leave_fine
        self.advance_recovery = dto.advance_recovery
        self.loan_emi = dto.loan_emi
        self.other = dto.other
        self.updated_by_id = updated_by_id

    def __repr__(self) -> str:
        return f"<DeductionModel {self.month}/{self.staff_code}>"


# ---------------------------------------------------------------------------
# PayrollRunModel
# ---------------------------------------------------------------------------

class PayrollRunModel(TrackedBase):
    """
    ORM model for ``PayrollRun`` -- a finalized monthly snapshot.

    Contract:
        At most one row per month.  Re-finalizing deletes the prior row and
        inserts a new one inside the same transaction.

    Guarantees:
        - ``month`` is unique (uq_payroll_run_month).
        - ``records`` holds line-item snapshots with string amounts.
    """

    __tablename__ = "payroll_runs"

    month: Mapped[str] = mapped_column(String(7), nullable=False)
    generated_at: Mapped[datetime] = mapped_column(nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    staff_count: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="finalized")
    records: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("month", name="uq_payroll_run_month"),
    )

    def to_dto(self):
        from detailing_engines import PayrollLineItem
        from detailing_modules.payroll.models import PayrollRun, PayrollRunStatus
        line_items = tuple(PayrollLineItem.from_snapshot(r) for r in self.records)
        # Total is re-derived from the exact snapshot, not the rounded column.
        return PayrollRun(
            id=self.id,
            month=self.month,
            generated_at=self.generated_at,
            total_amount=sum((item.net_pay for item in line_items), Decimal("0")),
            line_items=line_items,
            status=PayrollRunStatus(self.status),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PayrollRunModel":
        return cls(
            id=dto.id,
            month=dto.month,
            generated_at=dto.generated_at,
            total_amount=dto.total_amount,
            staff_count=dto.staff_count,
            status=dto.status.value if hasattr(dto.status, "value") else dto.status,
            records=[item.to_snapshot() for item in dto.line_items],
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PayrollRunModel {self.month}: {self.total_amount} ({self.staff_count} staff)>"


# ---------------------------------------------------------------------------
# ExpenseTransactionModel
# ---------------------------------------------------------------------------

class ExpenseTransactionModel(TrackedBase):
    """ORM model for ``ExpenseTransaction`` -- the labor expense posting."""

    __tablename__ = "payroll_expense_transactions"

    tx_date: Mapped[date] = mapped_column(Date, nullable=False)
    tx_type: Mapped[str] = mapped_column(String(50), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    method: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    reference_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        Index("idx_payroll_expense_reference", "reference_id"),
        Index("idx_payroll_expense_date", "tx_date"),
    )

    def to_dto(self):
        from detailing_modules.payroll.models import ExpenseTransaction, TransactionType
        return ExpenseTransaction(
            id=self.id,
            tx_date=self.tx_date,
            tx_type=TransactionType(self.tx_type),
            category=self.category,
            amount=self.amount,
            method=self.method,
            description=self.description,
            reference_id=self.reference_id,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ExpenseTransactionModel":
        return cls(
            id=dto.id,
            tx_date=dto.tx_date,
            tx_type=dto.tx_type.value if hasattr(dto.tx_type, "value") else dto.tx_type,
            category=dto.category,
            amount=dto.amount,
            method=dto.method,
            description=dto.description,
            reference_id=dto.reference_id,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ExpenseTransactionModel {self.tx_date}: {self.category} {self.amount}>"
