"""
Payroll Configuration Schema.

Wraps the engine ``IncentiveRules`` with the posting settings the payroll
lifecycle needs.  Actual values are loaded by ``detailing_config`` at
runtime.
"""

from dataclasses import dataclass, field

from detailing_engines.rules import IncentiveRules
from detailing_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.config")

VALID_PAYMENT_METHODS = {"TRANSFER", "CASH", "CHEQUE", "UPI"}


@dataclass
class PayrollConfig:
    """
    Configuration schema for the payroll module.

    Defaults reproduce the shop's current policy.  Override per deployment:

        config = PayrollConfig(
            rules=IncentiveRules(daily_car_threshold=12),
            payment_method="CASH",
        )
    """

    rules: IncentiveRules = field(default_factory=IncentiveRules)

    # Expense posting
    labor_expense_category: str = "Labor Expense"
    payment_method: str = "TRANSFER"
    currency: str = "INR"

    def __post_init__(self):
        if not self.labor_expense_category.strip():
            raise ValueError("labor_expense_category cannot be empty")
        if self.payment_method not in VALID_PAYMENT_METHODS:
            raise ValueError(
                f"payment_method must be one of {VALID_PAYMENT_METHODS}, "
                f"got '{self.payment_method}'"
            )
        if len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"currency must be a 3-letter code, got '{self.currency}'")

        logger.info(
            "payroll_config_initialized",
            extra={
                "labor_expense_category": self.labor_expense_category,
                "payment_method": self.payment_method,
                "currency": self.currency,
                "profit_pool_rate": str(self.rules.profit_pool_rate),
            },
        )
