"""
Pytest fixtures for the detailing payroll test suite.

Provides:
- Structured logging setup and log capture
- In-memory SQLite sessions with every payroll table created
- Deterministic clock and actor ids

Engine tests need none of the database fixtures; they call the pure
functions directly.
"""

import json
import logging
from collections.abc import Generator
from io import StringIO
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from detailing_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from detailing_kernel.domain.clock import DeterministicClock
from detailing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-000000000001")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture detailing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, payroll_service):
            payroll_service.finalize("2024-06", actor_id)
            logs = captured_logs()
            assert any(r["message"] == "payroll_finalized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("detailing_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.close()


# =============================================================================
# Time and actors
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID
