"""
Typed Exception Hierarchy for the Detailing Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the payroll engine (HR screens, the report CLI, batch jobs) must
react to specific conditions -- most importantly "this month is locked" --
without parsing message strings. Every exception therefore has:

  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (month, staff_id, offending value)

Example:
    try:
        service.set_deduction("2024-06", deduction, actor_id)
    except PayrollMonthFinalizedError as e:
        show_banner(f"Payroll for {e.month} is finalized")   # structured data
        api_response(code=e.code, month=e.month)             # machine-readable

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DetailingKernelError (base)
    |
    +-- PayrollError
    |   +-- InvalidMonthKeyError
    |   +-- PayrollMonthFinalizedError
    |   +-- PayrollRunNotFoundError
    |   +-- StaffNotFoundError
    |
    +-- ClassificationError
        +-- InvalidTimeError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                     | When Raised
----------------|--------------------------|--------------------------------------
Payroll         | INVALID_MONTH_KEY        | Month key is not YYYY-MM
                | PAYROLL_MONTH_FINALIZED  | Deduction edit on a finalized month
                | PAYROLL_RUN_NOT_FOUND    | No finalized run for the month
                | STAFF_NOT_FOUND          | Staff id is not on the roster
----------------|--------------------------|--------------------------------------
Classification  | INVALID_TIME             | Malformed time-in with strict parsing

===============================================================================
HANDLING PATTERNS
===============================================================================

1. A LOCKED MONTH IS RECOVERABLE, NOT A CRASH:

    except PayrollMonthFinalizedError as e:
        # Nothing was written; show the finalized snapshot instead.
        sheet = service.get_payroll(e.month)

2. RE-FINALIZING IS NOT AN ERROR:

    service.finalize("2024-06", actor_id)
    service.finalize("2024-06", actor_id)   # replaces the first snapshot

3. MALFORMED TIMES DEFAULT TO HOUR 0 unless strict parsing is configured,
   in which case InvalidTimeError carries the offending value.
"""


class DetailingKernelError(Exception):
    """
    Base exception for all detailing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "DETAILING_KERNEL_ERROR"


# Payroll exceptions


class PayrollError(DetailingKernelError):
    """Base exception for payroll lifecycle errors."""

    code: str = "PAYROLL_ERROR"


class InvalidMonthKeyError(PayrollError):
    """Month key does not have the YYYY-MM shape."""

    code: str = "INVALID_MONTH_KEY"

    def __init__(self, month: str):
        self.month = month
        super().__init__(f"Invalid payroll month key: {month!r} (expected YYYY-MM)")


class PayrollMonthFinalizedError(PayrollError):
    """
    Deductions cannot change once the month's payroll is finalized.

    Raised before anything is written, so callers can recover by showing
    the frozen snapshot.
    """

    code: str = "PAYROLL_MONTH_FINALIZED"

    def __init__(self, month: str, staff_id: str | None = None):
        self.month = month
        self.staff_id = staff_id
        super().__init__(f"Payroll for {month} is finalized; deductions are locked")


class PayrollRunNotFoundError(PayrollError):
    """No finalized payroll run exists for the month."""

    code: str = "PAYROLL_RUN_NOT_FOUND"

    def __init__(self, month: str):
        self.month = month
        super().__init__(f"No finalized payroll run for {month}")


class StaffNotFoundError(PayrollError):
    """Staff id is not present on the roster."""

    code: str = "STAFF_NOT_FOUND"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(f"Staff member not found: {staff_id}")


# Classification exceptions


class ClassificationError(DetailingKernelError):
    """Base exception for job classification errors."""

    code: str = "CLASSIFICATION_ERROR"


class InvalidTimeError(ClassificationError):
    """Time-in value could not be parsed as HH:MM."""

    code: str = "INVALID_TIME"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid time-in value: {value!r}")
