"""
Detailing Modules.

Thin orchestration layers over the Detailing Kernel and Engines.
Each module contains:
- Domain models (the nouns)
- Persistence models (ORM companions)
- Configuration schemas (policy and settings)
- A service facade that owns the transaction boundary

Modules:
- Payroll: monthly incentive payroll, deductions, finalize/expense posting

Actual pay arithmetic lives in the engines.
"""

from detailing_modules import payroll

__all__ = [
    "payroll",
]
