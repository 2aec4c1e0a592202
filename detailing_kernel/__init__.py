"""
Detailing Kernel -- shared infrastructure for the detailing payroll system.

Provides structured logging, the typed exception hierarchy, the SQLAlchemy
declarative base and session handling, the injectable clock, and the input
DTOs that the payroll engines consume.

Nothing in this package imports from ``detailing_engines`` or
``detailing_config``.  The only reference to ``detailing_modules`` is
``create_tables``, which loads the payroll ORM so every table is created.
"""

__version__ = "0.1.0"
