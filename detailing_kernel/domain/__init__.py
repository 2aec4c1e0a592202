"""Pure domain layer: clock abstraction and payroll input DTOs."""

from detailing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from detailing_kernel.domain.dtos import (
    DeductionRecord,
    JobRecord,
    JobStatus,
    ServiceCatalogEntry,
    StaffMember,
    StaffRole,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "DeductionRecord",
    "JobRecord",
    "JobStatus",
    "ServiceCatalogEntry",
    "StaffMember",
    "StaffRole",
]
