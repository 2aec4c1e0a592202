"""
Shared fixtures for payroll module tests.

Provides a seeded roster, a static job feed and service catalog, and a
PayrollService wired to the in-memory session and deterministic clock.

DESIGN RULE: Every fixture is opt-in.  No autouse.  Each test declares the
state it depends on in its function signature.
"""

from decimal import Decimal

import pytest

from detailing_kernel.domain.dtos import (
    JobRecord,
    ServiceCatalogEntry,
    StaffMember,
    StaffRole,
)
from detailing_modules.payroll import (
    PayrollService,
    StaticJobFeed,
    StaticServiceCatalog,
)

PAYROLL_MONTH = "2024-06"

ROSTER = (
    StaffMember(
        id="S1",
        name="Ravi",
        role=StaffRole.DETAILER,
        base_salary=Decimal("12000"),
        current_advance=Decimal("5000"),
        loan_balance=Decimal("3000"),
    ),
    StaffMember(id="S2", name="Asha", role=StaffRole.WASHER, base_salary=Decimal("9000")),
    StaffMember(
        id="S3",
        name="Former Employee",
        role=StaffRole.WASHER,
        base_salary=Decimal("7000"),
        is_active=False,
    ),
)

SERVICES = (
    ServiceCatalogEntry(id="SV-WASH", name="Foam Wash", sku="WSH-01", category="WASHING"),
    ServiceCatalogEntry(id="SV-CER", name="Ceramic Coating", sku="CER-01", category="COATING"),
    ServiceCatalogEntry(id="SV-POL", name="Machine Polish", sku="POL-01", category="DETAILING"),
)


def make_june_jobs() -> list[JobRecord]:
    """A small June: one evening car, one Sunday wash, one ceramic job."""
    return [
        JobRecord(
            id="J-EVE",
            date="2024-06-03",
            time_in="18:30",
            vehicle_class="SEDAN",
            total=Decimal("1000"),
            assigned_staff_ids=("S1", "S2"),
        ),
        JobRecord(
            id="J-SUN",
            date="2024-06-09",
            time_in="10:00",
            vehicle_class="SUV",
            total=Decimal("2500"),
            service_ids=("SV-WASH",),
            assigned_staff_ids=("S2",),
            referred_by_staff_id="S1",
        ),
        JobRecord(
            id="J-CER",
            date="2024-06-12",
            time_in="11:00",
            vehicle_class="SUV",
            total=Decimal("30000"),
            service_ids=("SV-CER",),
            assigned_staff_ids=("S1",),
        ),
    ]


@pytest.fixture
def job_feed():
    return StaticJobFeed(make_june_jobs())


@pytest.fixture
def service_catalog():
    return StaticServiceCatalog(SERVICES)


@pytest.fixture
def payroll_service(session, job_feed, service_catalog, deterministic_clock):
    return PayrollService(
        session,
        job_feed,
        service_catalog,
        clock=deterministic_clock,
    )


@pytest.fixture
def seeded_roster(payroll_service, test_actor_id):
    """Persist the roster through the service; returns the DTOs."""
    for member in ROSTER:
        payroll_service.upsert_staff(member, test_actor_id)
    return ROSTER
