"""
Finding Module Service (``ncar_modules.findings.service``).

Responsibility
--------------
Orchestrates the NCAR lifecycle commands -- create, edit, submit action
plan, approve, reject -- by validating input, asking the workflow
executor whether the move is legal, and swapping new record versions
into the finding and action-plan stores.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``FindingService`` is the sole writer of
``FindingStore`` and ``ActionPlanStore``.  Transition legality comes from
``FINDING_WORKFLOW`` via ``WorkflowExecutor``; time comes from the
injected ``Clock``.

Invariants enforced
-------------------
* Validation runs before gating.  A ``ValidationError`` leaves every store
  untouched.
* ``rejection_remarks`` is set only by ``reject_finding`` and cleared by
  every submission and approval.
* ``response_at`` is stamped on the first submission and never again.
* Action plans are appended, never replaced by a new submission.

Failure modes
-------------
* Unknown finding / plan id  -> ``FindingNotFoundError`` /
  ``ActionPlanNotFoundError``.
* Empty required fields or blank remarks  -> ``ValidationError``.
* Illegal move  -> silent no-op returning the unchanged finding, or
  ``PermissionDeniedError`` / ``InvalidTransitionError`` in strict mode.

Audit relevance
---------------
Every command runs inside a ``LogContext`` carrying the finding id and
actor role, and every transition attempt is traced by the executor.

Usage::

    service = FindingService(clock=clock, notifier=sink)
    finding = service.create_finding(fields, actor_role=Role.AUDITOR)
    finding, plan = service.submit_action_plan(
        finding.id, plan_fields, actor_role=Role.AUDITEE,
    )
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from ncar_kernel.domain.clock import Clock, SystemClock
from ncar_kernel.domain.records import ActionPlan, Finding
from ncar_kernel.domain.values import FindingStatus, NotificationSeverity, Role
from ncar_kernel.exceptions import PermissionDeniedError, ValidationError
from ncar_kernel.logging_config import LogContext, get_logger
from ncar_modules.findings.models import ActionPlanFields, FindingFields, as_utc
from ncar_modules.findings.workflows import (
    ACTION_APPROVE,
    ACTION_EDIT,
    ACTION_REJECT,
    ACTION_SUBMIT_ACTION_PLAN,
    CREATE_ROLES,
    FINDING_WORKFLOW,
)
from ncar_services.notifications import NotificationSink, notify_safely
from ncar_services.stores import ActionPlanStore, FindingStore
from ncar_services.workflow_executor import WorkflowExecutor

logger = get_logger("modules.findings.service")

UNKNOWN_AUDIT_PLAN = "AP_UNKNOWN"


def _role_value(role: Role | str) -> str:
    return role.value if isinstance(role, Role) else role


class FindingService:
    """
    Command surface for findings and their corrective-action plans.

    Contract
    --------
    * Commands return the resulting record.  A no-op returns the record
      exactly as it was (``is`` the stored object).
    * Read helpers never mutate.

    Guarantees
    ----------
    * Each store mutation is a whole-collection replacement.
    * The notification sink is called after each successful command
      (``success``), after a rejection (``warning``) and after a
      validation failure (``warning``); sink errors never propagate.
    """

    def __init__(
        self,
        findings: FindingStore | None = None,
        action_plans: ActionPlanStore | None = None,
        workflow_executor: WorkflowExecutor | None = None,
        clock: Clock | None = None,
        notifier: NotificationSink | None = None,
        default_deadline_days: int = 7,
    ):
        self._findings = findings if findings is not None else FindingStore()
        self._action_plans = (
            action_plans if action_plans is not None else ActionPlanStore()
        )
        self._executor = workflow_executor or WorkflowExecutor()
        self._clock = clock or SystemClock()
        self._notifier = notifier
        self._default_deadline_days = default_deadline_days

    @property
    def findings(self) -> FindingStore:
        return self._findings

    @property
    def action_plans(self) -> ActionPlanStore:
        return self._action_plans

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _notify(self, message: str, severity: NotificationSeverity) -> None:
        notify_safely(self._notifier, message, severity)

    def _validate(self, form: FindingFields | ActionPlanFields) -> None:
        try:
            form.validate()
        except ValidationError as e:
            logger.warning(
                "validation_failed",
                extra={"entity": e.entity, "missing_fields": e.missing_fields},
            )
            self._notify(str(e), NotificationSeverity.WARNING)
            raise

    def _transition(self, finding: Finding, action: str, role: str):
        return self._executor.execute(
            FINDING_WORKFLOW,
            entity_id=finding.id,
            current_state=finding.status.value,
            action=action,
            actor_role=role,
        )

    def default_deadline(self) -> datetime:
        """Deadline a new finding form starts with."""
        return self._clock.now() + timedelta(days=self._default_deadline_days)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_finding(
        self,
        fields: FindingFields,
        actor_role: Role | str,
    ) -> Finding | None:
        """Raise a new NCAR in OPEN.

        Returns None (no-op) when the role may not raise findings.
        """
        role = _role_value(actor_role)
        with LogContext.bind(actor_role=role):
            self._validate(fields)

            if role not in CREATE_ROLES:
                logger.warning(
                    "finding_create_denied",
                    extra={"role": role, "allowed_roles": list(CREATE_ROLES)},
                )
                if self._executor.strict:
                    raise PermissionDeniedError(
                        FINDING_WORKFLOW.name, "create", "", role,
                    )
                return None

            now = self._clock.now()
            finding = Finding(
                id=self._findings.next_id(now),
                statement=fields.statement,
                requirement=fields.requirement,
                evidence=fields.evidence,
                finding_type=fields.finding_type,
                area=fields.area,
                auditor=fields.auditor,
                auditee=fields.auditee,
                created_at=now,
                deadline=fields.resolved_deadline,
                status=FindingStatus.OPEN,
                audit_plan_id=fields.audit_plan_id or UNKNOWN_AUDIT_PLAN,
                standard_clause=fields.resolved_standard_clause,
                clause_number=fields.clause_number,
                attachment_name=fields.attachment_name,
                audit_type=fields.audit_type,
                process_name=fields.process_name,
            )
            self._findings.add(finding)

            logger.info(
                "finding_created",
                extra={
                    "finding_id": finding.id,
                    "finding_type": finding.finding_type,
                    "area": finding.area,
                    "auditee": finding.auditee,
                },
            )
            self._notify(f"NCAR {finding.id} created", NotificationSeverity.SUCCESS)
            return finding

    def edit_finding(
        self,
        finding_id: str,
        fields: FindingFields,
        actor_role: Role | str,
    ) -> Finding:
        """Replace the descriptive fields of an OPEN finding.

        Status, timestamps, escalation and remarks are never touched.
        """
        role = _role_value(actor_role)
        with LogContext.bind(finding_id=finding_id, actor_role=role):
            finding = self._findings.require(finding_id)
            self._validate(fields)

            if not self._transition(finding, ACTION_EDIT, role).success:
                return finding

            updated = replace(
                finding,
                statement=fields.statement,
                requirement=fields.requirement,
                evidence=fields.evidence,
                finding_type=fields.finding_type,
                area=fields.area,
                auditor=fields.auditor or finding.auditor,
                auditee=fields.auditee,
                deadline=fields.resolved_deadline,
                audit_plan_id=fields.audit_plan_id or finding.audit_plan_id,
                standard_clause=fields.resolved_standard_clause,
                clause_number=fields.clause_number,
                attachment_name=fields.attachment_name,
                audit_type=fields.audit_type,
                process_name=fields.process_name,
            )
            self._findings.replace(updated)
            logger.info("finding_edited", extra={"finding_id": finding_id})
            self._notify(f"NCAR {finding_id} updated", NotificationSeverity.SUCCESS)
            return updated

    def submit_action_plan(
        self,
        finding_id: str,
        plan_fields: ActionPlanFields,
        actor_role: Role | str = Role.AUDITEE,
    ) -> tuple[Finding, ActionPlan | None]:
        """Submit (or resubmit) a corrective-action plan.

        Returns:
            ``(finding, plan)``.  On a no-op the finding is unchanged and
            ``plan`` is None.
        """
        role = _role_value(actor_role)
        with LogContext.bind(finding_id=finding_id, actor_role=role):
            finding = self._findings.require(finding_id)
            self._validate(plan_fields)

            if not self._transition(finding, ACTION_SUBMIT_ACTION_PLAN, role).success:
                return finding, None

            now = self._clock.now()
            plan = ActionPlan(
                id=self._action_plans.next_id(now),
                ncar_id=finding.id,
                immediate_correction=plan_fields.immediate_correction,
                root_cause=plan_fields.root_cause,
                corrective_action=plan_fields.corrective_action,
                responsible_person=plan_fields.responsible_person,
                due_date=plan_fields.due_date,
                submitted_at=now,
                remarks=plan_fields.remarks,
            )
            updated = replace(
                finding,
                status=FindingStatus.ACTION_PLAN_SUBMITTED,
                rejection_remarks=None,
                response_at=finding.response_at or now,
            )
            self._action_plans.add(plan)
            self._findings.replace(updated)

            logger.info(
                "action_plan_submitted",
                extra={
                    "finding_id": finding_id,
                    "action_plan_id": plan.id,
                    "resubmission": finding.response_at is not None,
                },
            )
            self._notify(
                f"Action plan submitted for {finding_id}",
                NotificationSeverity.SUCCESS,
            )
            return updated, plan

    def approve_finding(self, finding_id: str, actor_role: Role | str) -> Finding:
        """Accept the submitted plan and close the finding."""
        role = _role_value(actor_role)
        with LogContext.bind(finding_id=finding_id, actor_role=role):
            finding = self._findings.require(finding_id)
            if not self._transition(finding, ACTION_APPROVE, role).success:
                return finding

            updated = replace(
                finding,
                status=FindingStatus.CLOSED,
                rejection_remarks=None,
            )
            self._findings.replace(updated)
            logger.info("finding_approved", extra={"finding_id": finding_id})
            self._notify(f"NCAR {finding_id} approved", NotificationSeverity.SUCCESS)
            return updated

    def reject_finding(
        self,
        finding_id: str,
        remarks: str,
        actor_role: Role | str,
    ) -> Finding:
        """Send the finding back to the auditee with remarks.

        Remarks are stored exactly as given; only the blank check strips
        whitespace.
        """
        role = _role_value(actor_role)
        with LogContext.bind(finding_id=finding_id, actor_role=role):
            finding = self._findings.require(finding_id)
            if remarks is None or not remarks.strip():
                error = ValidationError(
                    "rejection", reason="rejection remarks are required",
                )
                logger.warning(
                    "validation_failed",
                    extra={"entity": error.entity, "reason": error.reason},
                )
                self._notify(str(error), NotificationSeverity.WARNING)
                raise error

            if not self._transition(finding, ACTION_REJECT, role).success:
                return finding

            updated = replace(
                finding,
                status=FindingStatus.REOPENED,
                rejection_remarks=remarks,
            )
            self._findings.replace(updated)
            logger.info("finding_rejected", extra={"finding_id": finding_id})
            self._notify(
                f"NCAR {finding_id} rejected: {remarks}",
                NotificationSeverity.WARNING,
            )
            return updated

    def mark_action_plan_completed(
        self,
        plan_id: str,
        completed_at: datetime | None = None,
    ) -> ActionPlan:
        """Record that a corrective action was implemented.

        ``completed_at`` defaults to now.  Feeds CAP timeliness.
        """
        plan = self._action_plans.require(plan_id)
        updated = replace(
            plan,
            completed_at=as_utc(completed_at) if completed_at is not None else self._clock.now(),
        )
        self._action_plans.replace(updated)
        logger.info(
            "action_plan_completed",
            extra={
                "action_plan_id": plan_id,
                "finding_id": plan.ncar_id,
                "timely": updated.is_timely,
            },
        )
        return updated

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_finding(self, finding_id: str) -> Finding:
        return self._findings.require(finding_id)

    def list_findings(self) -> tuple[Finding, ...]:
        return self._findings.snapshot

    def current_action_plan(self, finding_id: str) -> ActionPlan | None:
        self._findings.require(finding_id)
        return self._action_plans.current_for(finding_id)

    def action_plan_history(self, finding_id: str) -> tuple[ActionPlan, ...]:
        self._findings.require(finding_id)
        return self._action_plans.history_for(finding_id)
