"""
Payroll collaborators (``detailing_modules.payroll.feeds``).

The job feed and the service catalog are owned outside payroll.  The
service only depends on these protocols; the static implementations back
tests, the report CLI, and callers that already hold the data in memory.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from detailing_kernel.domain.dtos import JobRecord, ServiceCatalogEntry


@runtime_checkable
class JobFeed(Protocol):
    """Source of job tickets."""

    def list_jobs(self) -> Sequence[JobRecord]: ...


@runtime_checkable
class ServiceCatalog(Protocol):
    """Source of sellable services."""

    def list_services(self) -> Sequence[ServiceCatalogEntry]: ...


class StaticJobFeed:
    """In-memory job feed.  ``replace`` swaps the data between reads."""

    def __init__(self, jobs: Iterable[JobRecord] = ()):
        self._jobs: tuple[JobRecord, ...] = tuple(jobs)

    def list_jobs(self) -> Sequence[JobRecord]:
        return self._jobs

    def replace(self, jobs: Iterable[JobRecord]) -> None:
        self._jobs = tuple(jobs)

    def add(self, job: JobRecord) -> None:
        self._jobs = self._jobs + (job,)


class StaticServiceCatalog:
    """In-memory service catalog."""

    def __init__(self, services: Iterable[ServiceCatalogEntry] = ()):
        self._services: tuple[ServiceCatalogEntry, ...] = tuple(services)

    def list_services(self) -> Sequence[ServiceCatalogEntry]:
        return self._services
