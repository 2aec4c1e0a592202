"""
DTOs -- Pure domain data transfer objects consumed by the payroll engines.

Responsibility:
    Defines the immutable input records the payroll engines read: the staff
    roster (StaffMember), the job/ticket feed (JobRecord), the service
    catalog (ServiceCatalogEntry), and the per-staff monthly deduction
    breakdown (DeductionRecord).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  ORM models in ``detailing_modules`` convert
    to and from these classes at the persistence boundary.

Invariants enforced:
    - All records are ``frozen=True``.
    - All monetary fields are ``Decimal`` -- NEVER ``float``.
    - Sequence fields are normalised to tuples so records stay hashable
      and cannot be mutated through a shared list.

Failure modes:
    - ValueError on negative base salary, balances or deduction amounts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class StaffRole(str, Enum):
    """Fixed set of roster roles."""

    WASHER = "Washer"
    DETAILER = "Detailer"
    MASTER_DETAILER = "Master Detailer"
    OPS_MANAGER = "Ops Manager"
    ADMIN = "Admin"


class JobStatus(str, Enum):
    """Job ticket states. Only INVOICED jobs participate in payroll."""

    RECEIVED = "RECEIVED"
    IN_PROGRESS = "IN_PROGRESS"
    QC_CHECK = "QC_CHECK"
    READY = "READY"
    INVOICED = "INVOICED"


ZERO = Decimal("0")


@dataclass(frozen=True)
class StaffMember:
    """A roster entry as read by payroll."""

    id: str
    name: str
    role: StaffRole
    base_salary: Decimal
    current_advance: Decimal = ZERO
    loan_balance: Decimal = ZERO
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.base_salary < 0:
            raise ValueError("base_salary cannot be negative")
        if self.current_advance < 0 or self.loan_balance < 0:
            raise ValueError("advance and loan balances cannot be negative")


@dataclass(frozen=True)
class JobRecord:
    """
    A service ticket from the job feed.

    ``date`` is kept as the ISO string the feed supplies: month membership
    is a prefix match and a malformed date must not abort a payroll run.
    """

    id: str
    date: str
    time_in: str
    vehicle_class: str
    total: Decimal
    service_ids: tuple[str, ...] = field(default_factory=tuple)
    assigned_staff_ids: tuple[str, ...] = field(default_factory=tuple)
    referred_by_staff_id: str | None = None
    status: JobStatus = JobStatus.INVOICED

    def __post_init__(self) -> None:
        object.__setattr__(self, "service_ids", tuple(self.service_ids))
        object.__setattr__(self, "assigned_staff_ids", tuple(self.assigned_staff_ids))

    @property
    def is_invoiced(self) -> bool:
        return self.status == JobStatus.INVOICED


@dataclass(frozen=True)
class ServiceCatalogEntry:
    """A sellable service; name/SKU drive premium detection, category drives washing."""

    id: str
    name: str
    sku: str
    category: str


@dataclass(frozen=True)
class DeductionRecord:
    """Per-staff, per-month deduction breakdown."""

    staff_id: str
    late_fine: Decimal = ZERO
    leave_fine: Decimal = ZERO
    advance_recovery: Decimal = ZERO
    loan_emi: Decimal = ZERO
    other: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("late_fine", "leave_fine", "advance_recovery", "loan_emi", "other"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

    @classmethod
    def zero(cls, staff_id: str) -> DeductionRecord:
        """Deduction record used when nothing was entered for the month."""
        return cls(staff_id=staff_id)

    @property
    def total(self) -> Decimal:
        return (
            self.late_fine
            + self.leave_fine
            + self.advance_recovery
            + self.loan_emi
            + self.other
        )
