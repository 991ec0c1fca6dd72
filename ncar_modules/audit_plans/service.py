"""
Audit Plan Module Service (``ncar_modules.audit_plans.service``).

Responsibility
--------------
Create, edit and advance audit plans.  Sole writer of ``AuditPlanStore``.

Invariants enforced
-------------------
* Status is monotonic: ``advance`` moves exactly one stage, CLOSED stays
  CLOSED.
* ``is_locked`` is carried as data and never consulted.

Failure modes
-------------
* Unknown plan id  -> ``AuditPlanNotFoundError``.
* No auditor or no auditee, or end before start  -> ``ValidationError``.
* Illegal move  -> no-op, or a ``TransitionError`` in strict mode.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from ncar_engines.filters import filter_audit_plans
from ncar_kernel.domain.clock import Clock, SystemClock
from ncar_kernel.domain.records import AuditPlan
from ncar_kernel.domain.values import AuditPlanStatus, NotificationSeverity, Role
from ncar_kernel.exceptions import PermissionDeniedError, ValidationError
from ncar_kernel.logging_config import LogContext, get_logger
from ncar_modules.audit_plans.models import NO_ATTACHMENT, AuditPlanFields
from ncar_modules.audit_plans.workflows import (
    ACTION_ADVANCE,
    ACTION_EDIT,
    AUDIT_PLAN_WORKFLOW,
    CREATE_ROLES,
)
from ncar_services.notifications import NotificationSink, notify_safely
from ncar_services.stores import AuditPlanStore
from ncar_services.workflow_executor import WorkflowExecutor

logger = get_logger("modules.audit_plans.service")


def _role_value(role: Role | str) -> str:
    return role.value if isinstance(role, Role) else role


class AuditPlanService:
    """
    Command surface for audit plans.

    Contract
    --------
    * Commands return the resulting plan; a no-op returns it unchanged.
    * ``create_audit_plan`` returns None when the role may not create.
    """

    def __init__(
        self,
        audit_plans: AuditPlanStore | None = None,
        workflow_executor: WorkflowExecutor | None = None,
        clock: Clock | None = None,
        notifier: NotificationSink | None = None,
    ):
        self._plans = audit_plans if audit_plans is not None else AuditPlanStore()
        self._executor = workflow_executor or WorkflowExecutor()
        self._clock = clock or SystemClock()
        self._notifier = notifier

    @property
    def audit_plans(self) -> AuditPlanStore:
        return self._plans

    def _validate(self, fields: AuditPlanFields) -> None:
        try:
            fields.validate()
        except ValidationError as e:
            logger.warning(
                "validation_failed",
                extra={"entity": e.entity, "missing_fields": e.missing_fields},
            )
            notify_safely(self._notifier, str(e), NotificationSeverity.WARNING)
            raise

    def create_audit_plan(
        self,
        fields: AuditPlanFields,
        actor_role: Role | str,
    ) -> AuditPlan | None:
        role = _role_value(actor_role)
        with LogContext.bind(actor_role=role):
            self._validate(fields)
            now = self._clock.now()
            start = fields.start_date or now.date()
            end = fields.end_date or start
            if end < start:
                self._validate(replace(fields, start_date=start, end_date=end))

            if role not in CREATE_ROLES:
                logger.warning(
                    "audit_plan_create_denied",
                    extra={"role": role, "allowed_roles": list(CREATE_ROLES)},
                )
                if self._executor.strict:
                    raise PermissionDeniedError(
                        AUDIT_PLAN_WORKFLOW.name, "create", "", role,
                    )
                return None

            plan = AuditPlan(
                id=self._plans.next_id(now),
                start_date=start,
                end_date=end,
                auditors=fields.auditor_names,
                auditees=fields.auditee_names,
                created_at=now,
                audit_type=fields.audit_type,
                process_name=fields.process_name,
                status=AuditPlanStatus.DRAFT,
                attachment_name=fields.attachment_name or NO_ATTACHMENT,
            )
            self._plans.add(plan)
            logger.info(
                "audit_plan_created",
                extra={
                    "audit_plan_id": plan.id,
                    "auditor_count": len(plan.auditors),
                    "auditee_count": len(plan.auditees),
                },
            )
            notify_safely(
                self._notifier,
                f"Audit plan {plan.id} created",
                NotificationSeverity.SUCCESS,
            )
            return plan

    def edit_audit_plan(
        self,
        plan_id: str,
        fields: AuditPlanFields,
        actor_role: Role | str,
    ) -> AuditPlan:
        """Replace the schedule and participants of a non-closed plan."""
        role = _role_value(actor_role)
        with LogContext.bind(audit_plan_id=plan_id, actor_role=role):
            plan = self._plans.require(plan_id)
            self._validate(fields)
            start = fields.start_date or plan.start_date
            end = fields.end_date or max(start, plan.end_date)
            if end < start:
                self._validate(replace(fields, start_date=start, end_date=end))

            result = self._executor.execute(
                AUDIT_PLAN_WORKFLOW,
                entity_id=plan.id,
                current_state=plan.status.value,
                action=ACTION_EDIT,
                actor_role=role,
            )
            if not result.success:
                return plan

            updated = replace(
                plan,
                start_date=start,
                end_date=end,
                auditors=fields.auditor_names,
                auditees=fields.auditee_names,
                audit_type=fields.audit_type,
                process_name=fields.process_name,
                attachment_name=fields.attachment_name or plan.attachment_name,
            )
            self._plans.replace(updated)
            logger.info("audit_plan_edited", extra={"audit_plan_id": plan_id})
            notify_safely(
                self._notifier,
                f"Audit plan {plan_id} updated",
                NotificationSeverity.SUCCESS,
            )
            return updated

    def advance_audit_plan(self, plan_id: str, actor_role: Role | str) -> AuditPlan:
        """Move the plan one stage forward; CLOSED is a no-op."""
        role = _role_value(actor_role)
        with LogContext.bind(audit_plan_id=plan_id, actor_role=role):
            plan = self._plans.require(plan_id)
            result = self._executor.execute(
                AUDIT_PLAN_WORKFLOW,
                entity_id=plan.id,
                current_state=plan.status.value,
                action=ACTION_ADVANCE,
                actor_role=role,
            )
            if not result.success:
                return plan

            updated = replace(plan, status=AuditPlanStatus(result.to_state))
            self._plans.replace(updated)
            logger.info(
                "audit_plan_advanced",
                extra={
                    "audit_plan_id": plan_id,
                    "from_status": plan.status,
                    "to_status": updated.status,
                },
            )
            notify_safely(
                self._notifier,
                f"Audit plan {plan_id} moved to {updated.status.value}",
                NotificationSeverity.SUCCESS,
            )
            return updated

    def get_audit_plan(self, plan_id: str) -> AuditPlan:
        return self._plans.require(plan_id)

    def list_audit_plans(self) -> tuple[AuditPlan, ...]:
        return self._plans.snapshot

    def plans_active_on(self, day: date) -> tuple[AuditPlan, ...]:
        """Plans whose ``[start_date, end_date]`` contains ``day``."""
        return tuple(filter_audit_plans(self._plans.snapshot, day=day))

    def filter_audit_plans(
        self,
        query: str = "",
        status: AuditPlanStatus | None = None,
        day: date | None = None,
    ) -> tuple[AuditPlan, ...]:
        """The plan list as searched by id or participant, stage and day."""
        return tuple(filter_audit_plans(self._plans.snapshot, query, status, day))
