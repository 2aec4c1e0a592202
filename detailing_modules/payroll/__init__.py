"""
Payroll Module (``detailing_modules.payroll``).

Responsibility
--------------
Thin ERP glue for the monthly incentive payroll: roster and deduction
persistence, the DRAFT -> FINALIZED lifecycle, frozen run snapshots and
the aggregate labor expense transaction.

Architecture position
---------------------
**Modules layer** -- models, config schema, ORM, a read-only selector and
a service facade that delegates all pay arithmetic to
``detailing_engines.compute_payroll``.

Invariants enforced
-------------------
* Transaction boundary owned by ``PayrollService``.
* One finalized run per month; re-finalizing replaces it.
* Deductions are locked once a month is finalized.

Failure modes
-------------
* ``PayrollMonthFinalizedError`` on deduction edits for a locked month.
* ``StaffNotFoundError`` on deductions for unknown staff.
"""

from detailing_modules.payroll.config import PayrollConfig
from detailing_modules.payroll.feeds import (
    JobFeed,
    ServiceCatalog,
    StaticJobFeed,
    StaticServiceCatalog,
)
from detailing_modules.payroll.models import (
    ExpenseTransaction,
    PayrollRun,
    PayrollRunStatus,
    PayrollSheet,
    PayrollTotals,
    TransactionType,
)
from detailing_modules.payroll.selectors import PayrollSelector
from detailing_modules.payroll.service import PayrollService

__all__ = [
    "ExpenseTransaction",
    "JobFeed",
    "PayrollConfig",
    "PayrollRun",
    "PayrollRunStatus",
    "PayrollSelector",
    "PayrollService",
    "PayrollSheet",
    "PayrollTotals",
    "ServiceCatalog",
    "StaticJobFeed",
    "StaticServiceCatalog",
    "TransactionType",
]
