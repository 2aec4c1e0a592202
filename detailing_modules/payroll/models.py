"""
Payroll Run Models (``detailing_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects for the payroll run lifecycle: the run
status, the finalized run snapshot, the aggregate expense transaction it
emits, sheet totals, and the sheet returned to readers.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``PayrollService`` and returned to callers.  Line items themselves are
engine output (``detailing_engines.PayrollLineItem``).

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* A ``PayrollRun`` is always FINALIZED; drafts are never stored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from detailing_engines import PayrollLineItem
from detailing_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.models")


class PayrollRunStatus(Enum):
    """Payroll month lifecycle states."""
    DRAFT = "draft"
    FINALIZED = "finalized"


class TransactionType(Enum):
    EXPENSE = "EXPENSE"


@dataclass(frozen=True)
class PayrollTotals:
    """Column totals of a payroll sheet."""
    base_salary: Decimal = Decimal("0")
    incentives: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    net_pay: Decimal = Decimal("0")
    staff_count: int = 0


@dataclass(frozen=True)
class PayrollRun:
    """A finalized, immutable payroll snapshot for one month."""
    month: str
    generated_at: datetime
    total_amount: Decimal
    line_items: tuple[PayrollLineItem, ...] = field(default_factory=tuple)
    id: UUID = field(default_factory=uuid4)
    status: PayrollRunStatus = PayrollRunStatus.FINALIZED

    def __post_init__(self):
        if self.status is not PayrollRunStatus.FINALIZED:
            raise ValueError("a stored payroll run is always finalized")

    @property
    def staff_count(self) -> int:
        return len(self.line_items)


@dataclass(frozen=True)
class ExpenseTransaction:
    """Aggregate labor expense emitted when a month is finalized."""
    tx_date: date
    amount: Decimal
    category: str
    method: str
    description: str
    reference_id: UUID | None = None
    tx_type: TransactionType = TransactionType.EXPENSE
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class PayrollSheet:
    """What a reader sees for a month: live draft or frozen snapshot."""
    month: str
    status: PayrollRunStatus
    line_items: tuple[PayrollLineItem, ...]
    totals: PayrollTotals
    run: PayrollRun | None = None

    @property
    def is_finalized(self) -> bool:
        return self.status is PayrollRunStatus.FINALIZED
