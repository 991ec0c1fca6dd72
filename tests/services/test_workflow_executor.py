"""
Tests for WorkflowExecutor (ncar_services.workflow_executor).

Covers:
- lenient mode: failed moves come back as results, never raise
- strict mode: InvalidTransitionError vs PermissionDeniedError, and the
  per-call override
- enum inputs normalised to their values
- trace records: log level per outcome, outcome_sink, LogContext fields
"""

import pytest

from ncar_kernel.domain.values import FindingStatus, Role
from ncar_kernel.exceptions import InvalidTransitionError, PermissionDeniedError
from ncar_kernel.logging_config import LogContext
from ncar_modules.findings.workflows import FINDING_WORKFLOW
from ncar_services.workflow_executor import (
    TRACE_TYPE_WORKFLOW_TRANSITION,
    WorkflowExecutor,
)

ENTITY = "NCAR_000001_202401"


class TestLenientMode:

    def test_success(self, workflow_executor):
        result = workflow_executor.execute(
            FINDING_WORKFLOW, ENTITY, FindingStatus.OPEN, "submit_action_plan", Role.AUDITEE,
        )
        assert result.success
        assert result.to_state == FindingStatus.ACTION_PLAN_SUBMITTED.value

    def test_wrong_role_returns_failed_result(self, workflow_executor):
        result = workflow_executor.execute(
            FINDING_WORKFLOW, ENTITY, FindingStatus.OPEN, "submit_action_plan", Role.AUDITOR,
        )
        assert not result.success
        assert result.outcome == "permission_denied"

    def test_missing_transition_returns_failed_result(self, workflow_executor):
        result = workflow_executor.execute(
            FINDING_WORKFLOW, ENTITY, FindingStatus.CLOSED, "reject", Role.LEAD_AUDITOR,
        )
        assert not result.success
        assert result.outcome == "no_transition"

    def test_plain_strings_accepted(self, workflow_executor):
        result = workflow_executor.execute(
            FINDING_WORKFLOW, ENTITY, "Action Plan Submitted", "approve", "LEAD_AUDITOR",
        )
        assert result.success

    def test_default_is_lenient(self):
        assert WorkflowExecutor().strict is False


class TestStrictMode:

    def test_no_transition_raises_invalid(self, strict_executor):
        with pytest.raises(InvalidTransitionError) as exc:
            strict_executor.execute(
                FINDING_WORKFLOW, ENTITY, FindingStatus.CLOSED, "approve", Role.LEAD_AUDITOR,
            )
        assert exc.value.code == "INVALID_TRANSITION"
        assert exc.value.from_state == "Closed"
        assert exc.value.workflow == "ncar_finding"

    def test_wrong_role_raises_permission_denied(self, strict_executor):
        with pytest.raises(PermissionDeniedError) as exc:
            strict_executor.execute(
                FINDING_WORKFLOW, ENTITY, FindingStatus.ACTION_PLAN_SUBMITTED,
                "approve", Role.AUDITOR,
            )
        assert exc.value.role == "AUDITOR"
        assert exc.value.action == "approve"

    def test_missing_transition_wins_over_role(self, strict_executor):
        with pytest.raises(InvalidTransitionError):
            strict_executor.execute(
                FINDING_WORKFLOW, ENTITY, FindingStatus.OPEN, "approve", Role.AUDITEE,
            )

    def test_per_call_override(self, workflow_executor, strict_executor):
        with pytest.raises(PermissionDeniedError):
            workflow_executor.execute(
                FINDING_WORKFLOW, ENTITY, FindingStatus.OPEN, "edit", Role.AUDITEE,
                strict=True,
            )
        result = strict_executor.execute(
            FINDING_WORKFLOW, ENTITY, FindingStatus.OPEN, "edit", Role.AUDITEE,
            strict=False,
        )
        assert not result.success


class TestTracing:

    def test_outcome_sink_receives_every_attempt(self):
        records = []
        executor = WorkflowExecutor(outcome_sink=records.append)
        executor.execute(FINDING_WORKFLOW, ENTITY, "Open", "edit", "AUDITOR")
        executor.execute(FINDING_WORKFLOW, ENTITY, "Open", "approve", "LEAD_AUDITOR")

        assert [r["outcome"] for r in records] == ["success", "no_transition"]
        assert records[0]["trace_type"] == TRACE_TYPE_WORKFLOW_TRANSITION
        assert records[0]["to_state"] == "Open"
        assert "to_state" not in records[1]

    def test_failed_attempt_logged_at_warning(self, captured_logs, workflow_executor):
        workflow_executor.execute(FINDING_WORKFLOW, ENTITY, "Open", "approve", "LEAD_AUDITOR")
        (record,) = [r for r in captured_logs() if r["message"] == "workflow_transition"]
        assert record["level"] == "WARNING"
        assert record["entity_id"] == ENTITY

    def test_success_logged_at_info(self, captured_logs, workflow_executor):
        workflow_executor.execute(FINDING_WORKFLOW, ENTITY, "Open", "edit", "AUDITOR")
        (record,) = [r for r in captured_logs() if r["message"] == "workflow_transition"]
        assert record["level"] == "INFO"
        assert record["workflow"] == "ncar_finding"

    def test_context_fields_attached(self):
        records = []
        executor = WorkflowExecutor(outcome_sink=records.append)
        with LogContext.bind(correlation_id="req-7"):
            executor.execute(FINDING_WORKFLOW, ENTITY, "Open", "edit", "AUDITOR")
        assert records[0]["correlation_id"] == "req-7"
