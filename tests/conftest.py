"""
Pytest fixtures for the NCAR tracker test suite.

Provides:
- Structured logging configuration and log capture
- A deterministic clock
- A seeded user directory (lead auditor, auditor, two department heads,
  three managers)
- Wired module services sharing one set of stores
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from ncar_kernel.domain.clock import DeterministicClock
from ncar_kernel.domain.directory import User, UserDirectory
from ncar_kernel.domain.values import Designation, Role
from ncar_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ncar_modules.audit_plans.service import AuditPlanService
from ncar_modules.findings.service import FindingService
from ncar_services.notifications import CollectingNotificationSink
from ncar_services.stores import ActionPlanStore, AuditPlanStore, FindingStore
from ncar_services.workflow_executor import WorkflowExecutor

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


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
    Capture ncar_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, finding_service):
            finding_service.create_finding(...)
            logs = captured_logs()
            assert any(r["message"] == "finding_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ncar_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(T0)


# =============================================================================
# Directory fixtures
# =============================================================================


LEAD = User("U1", "Lena Lead", Role.LEAD_AUDITOR, "IA", Designation.STAFF)
AUDITOR = User("U2", "Arun Auditor", Role.AUDITOR, "IA", Designation.STAFF)
HEAD_TSD = User("U10", "Hana Head", Role.AUDITEE, "TSD", Designation.DEPARTMENT_HEAD)
MANAGER_A = User(
    "U11", "Mark Manager", Role.AUDITEE, "TSD", Designation.MANAGER,
    reports_to="U10",
)
MANAGER_B = User(
    "U12", "Mia Manager", Role.AUDITEE, "TSD", Designation.MANAGER,
    reports_to="U10",
)
HEAD_CSS = User("U20", "Hugo Head", Role.AUDITEE, "CSS", Designation.DEPARTMENT_HEAD)
MANAGER_C = User(
    "U21", "Cora Manager", Role.AUDITEE, "CSS", Designation.MANAGER,
)


@pytest.fixture
def users() -> list[User]:
    return [LEAD, AUDITOR, HEAD_TSD, MANAGER_A, MANAGER_B, HEAD_CSS, MANAGER_C]


@pytest.fixture
def directory(users) -> UserDirectory:
    return UserDirectory(users)


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def notification_sink():
    return CollectingNotificationSink()


@pytest.fixture
def finding_store():
    return FindingStore()


@pytest.fixture
def action_plan_store():
    return ActionPlanStore()


@pytest.fixture
def workflow_executor():
    return WorkflowExecutor()


@pytest.fixture
def strict_executor():
    return WorkflowExecutor(strict=True)


@pytest.fixture
def finding_service(
    finding_store,
    action_plan_store,
    workflow_executor,
    deterministic_clock,
    notification_sink,
):
    return FindingService(
        finding_store,
        action_plan_store,
        workflow_executor,
        clock=deterministic_clock,
        notifier=notification_sink,
    )


@pytest.fixture
def strict_finding_service(
    finding_store,
    action_plan_store,
    strict_executor,
    deterministic_clock,
    notification_sink,
):
    return FindingService(
        finding_store,
        action_plan_store,
        strict_executor,
        clock=deterministic_clock,
        notifier=notification_sink,
    )


@pytest.fixture
def audit_plan_service(workflow_executor, deterministic_clock, notification_sink):
    return AuditPlanService(
        AuditPlanStore(),
        workflow_executor,
        clock=deterministic_clock,
        notifier=notification_sink,
    )
