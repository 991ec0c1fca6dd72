"""
Audit Plan Workflow (``ncar_modules.audit_plans.workflows``).

Responsibility
--------------
Declares the audit-plan lifecycle ``DRAFT -> PLANNED -> ACTUAL -> CLOSED``.
``advance`` moves exactly one stage forward; ``edit`` is a
self-transition at every stage except CLOSED.  Both belong to the lead
auditor.

Invariants enforced
-------------------
* Stages only move forward: every ``advance`` goes to the next rank.
* CLOSED is terminal.

Audit relevance
---------------
Workflow definition logged at module-load time.
"""

from ncar_kernel.domain.values import AuditPlanStatus, Role
from ncar_kernel.domain.workflow import Transition, Workflow
from ncar_kernel.logging_config import get_logger

logger = get_logger("modules.audit_plans.workflows")

ACTION_ADVANCE = "advance"
ACTION_EDIT = "edit"

CREATE_ROLES: tuple[str, ...] = (Role.LEAD_AUDITOR.value,)

_LEAD = (Role.LEAD_AUDITOR.value,)


def _stage_transitions() -> tuple[Transition, ...]:
    transitions: list[Transition] = []
    for stage in AuditPlanStatus:
        if stage.next is None:
            continue
        transitions.append(
            Transition(stage.value, stage.value, action=ACTION_EDIT, roles=_LEAD)
        )
        transitions.append(
            Transition(stage.value, stage.next.value, action=ACTION_ADVANCE, roles=_LEAD)
        )
    return tuple(transitions)


AUDIT_PLAN_WORKFLOW = Workflow(
    name="audit_plan",
    description="Audit plan scheduling lifecycle",
    initial_state=AuditPlanStatus.DRAFT.value,
    states=tuple(s.value for s in AuditPlanStatus),
    terminal_states=(AuditPlanStatus.CLOSED.value,),
    transitions=_stage_transitions(),
)

logger.info(
    "audit_plan_workflow_registered",
    extra={
        "workflow_name": AUDIT_PLAN_WORKFLOW.name,
        "state_count": len(AUDIT_PLAN_WORKFLOW.states),
        "transition_count": len(AUDIT_PLAN_WORKFLOW.transitions),
        "initial_state": AUDIT_PLAN_WORKFLOW.initial_state,
    },
)
