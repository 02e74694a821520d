"""
Pytest fixtures for the costs kernel test suite.

Domain tests run against InMemoryCostEntrySource; selector tests run
against an in-memory SQLite database.  Ids are deterministic so failures
are reproducible and ordering by id is predictable.
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from costs_kernel.db import create_tables, get_session, init_engine_from_url
from costs_kernel.db.engine import reset_engine
from costs_kernel.domain.aggregation import CostAggregator, InMemoryCostEntrySource
from costs_kernel.domain.models import (
    CostLogEntry,
    CostType,
    Project,
    TimeLogEntry,
    User,
    WorkItem,
)
from costs_kernel.domain.permissions import Permission
from costs_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
)
from costs_services.permission_resolver import MembershipPermissionResolver


def uid(n: int) -> UUID:
    """Deterministic UUID; ``uid(1) < uid(2)``."""
    return UUID(f"00000000-0000-4000-a000-{n:012d}")


PROJECT_ID = uid(1)
DISABLED_PROJECT_ID = uid(2)
WORK_ITEM_ID = uid(10)
OTHER_WORK_ITEM_ID = uid(11)
ALICE_ID = uid(20)
BOB_ID = uid(21)
CAROL_ID = uid(22)
TYPE_X_ID = uid(30)
TYPE_Y_ID = uid(31)

FULL_ROLE = "controller"
OWN_ROLE = "developer"
RATE_ROLE = "rate_viewer"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    configure_logging(level=logging.DEBUG, replace=True)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture costs_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, policy):
            policy.evaluate(user, work_item)
            logs = captured_logs()
            assert any(r["message"] == "cost_visibility_evaluated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("costs_kernel")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def project() -> Project:
    return Project(id=PROJECT_ID, name="Apollo")


@pytest.fixture
def disabled_project() -> Project:
    return Project(id=DISABLED_PROJECT_ID, name="Gemini", costs_enabled=False)


@pytest.fixture
def work_item(project) -> WorkItem:
    return WorkItem(id=WORK_ITEM_ID, project=project, subject="Build launch pad")


@pytest.fixture
def disabled_work_item(disabled_project) -> WorkItem:
    return WorkItem(id=OTHER_WORK_ITEM_ID, project=disabled_project, subject="Paperwork")


@pytest.fixture
def alice() -> User:
    return User(id=ALICE_ID, name="Alice")


@pytest.fixture
def bob() -> User:
    return User(id=BOB_ID, name="Bob")


@pytest.fixture
def carol() -> User:
    return User(id=CAROL_ID, name="Carol")


@pytest.fixture
def cost_types() -> tuple[CostType, ...]:
    return (
        CostType(id=TYPE_X_ID, name="Travel", unit="trip", unit_plural="trips"),
        CostType(id=TYPE_Y_ID, name="Equipment", unit="piece", unit_plural="pieces"),
    )


def make_time_entry(n: int, work_item_id: UUID, user_id: UUID, hours: str, rate: str, activity: str = "Development") -> TimeLogEntry:
    return TimeLogEntry(
        id=uid(100 + n),
        work_item_id=work_item_id,
        user_id=user_id,
        hours=Decimal(hours),
        rate=Decimal(rate),
        activity=activity,
    )


def make_cost_entry(n: int, work_item_id: UUID, user_id: UUID, cost_type_id: UUID, amount: str, units: str = "1") -> CostLogEntry:
    return CostLogEntry(
        id=uid(200 + n),
        work_item_id=work_item_id,
        user_id=user_id,
        cost_type_id=cost_type_id,
        amount=Decimal(amount),
        units=Decimal(units),
    )


@pytest.fixture
def time_entries() -> tuple[TimeLogEntry, ...]:
    """Alice logs 2h at 50 (100); Bob logs 3h at 50 (150)."""
    return (
        make_time_entry(1, WORK_ITEM_ID, ALICE_ID, "2", "50"),
        make_time_entry(2, WORK_ITEM_ID, BOB_ID, "3", "50"),
    )


@pytest.fixture
def cost_entries() -> tuple[CostLogEntry, ...]:
    """typeX: 10 (Alice) + 3 (Bob); typeY: 5 (Alice)."""
    return (
        make_cost_entry(1, WORK_ITEM_ID, ALICE_ID, TYPE_X_ID, "10", "2"),
        make_cost_entry(2, WORK_ITEM_ID, ALICE_ID, TYPE_Y_ID, "5", "1"),
        make_cost_entry(3, WORK_ITEM_ID, BOB_ID, TYPE_X_ID, "3", "1"),
    )


@pytest.fixture
def source(time_entries, cost_entries, cost_types) -> InMemoryCostEntrySource:
    return InMemoryCostEntrySource(time_entries, cost_entries, cost_types)


@pytest.fixture
def aggregator(source) -> CostAggregator:
    return CostAggregator(source)


@pytest.fixture
def role_permissions() -> dict[str, list[Permission]]:
    return {
        FULL_ROLE: [
            Permission.VIEW_COST_ENTRIES,
            Permission.LOG_COSTS,
            Permission.VIEW_COST_RATES,
            Permission.VIEW_TIME_ENTRIES,
            Permission.VIEW_HOURLY_RATES,
        ],
        OWN_ROLE: [
            Permission.VIEW_OWN_COST_ENTRIES,
            Permission.LOG_OWN_COSTS,
            Permission.VIEW_OWN_TIME_ENTRIES,
            Permission.VIEW_OWN_HOURLY_RATE,
        ],
        RATE_ROLE: [Permission.VIEW_TIME_ENTRIES, Permission.VIEW_OWN_HOURLY_RATE],
    }


@pytest.fixture
def resolver(role_permissions) -> MembershipPermissionResolver:
    """Bob sees everything, Alice only her own entries, Carol nothing."""
    return MembershipPermissionResolver(
        role_permissions,
        memberships={
            (BOB_ID, PROJECT_ID): [FULL_ROLE],
            (ALICE_ID, PROJECT_ID): [OWN_ROLE],
            (BOB_ID, DISABLED_PROJECT_ID): [FULL_ROLE],
        },
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """A session on a fresh in-memory SQLite database."""
    init_engine_from_url("sqlite://")
    create_tables()
    sess = get_session()
    yield sess
    sess.close()
    reset_engine()
