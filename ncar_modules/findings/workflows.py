"""
Finding Workflow (``ncar_modules.findings.workflows``).

Responsibility
--------------
Declares the NCAR lifecycle as a ``(from_state, action, role)`` table.
Edits are self-transitions so that every command, including ones that
leave the status alone, is gated by the same table.

Architecture position
---------------------
**Modules layer** -- declarative workflow definitions.  Imports canonical
Transition and Workflow from ``ncar_kernel.domain.workflow``.  Consumed
by ``FindingService`` through the workflow executor.

Invariants enforced
-------------------
* CLOSED and VALIDATED have no outgoing transitions.
* REJECTED accepts the same commands as REOPENED, but no transition
  writes REJECTED or VALIDATED.

Audit relevance
---------------
Workflow definitions are logged at module-load time with state and
transition counts.
"""

from ncar_kernel.domain.values import FindingStatus, Role
from ncar_kernel.domain.workflow import Transition, Workflow
from ncar_kernel.logging_config import get_logger

logger = get_logger("modules.findings.workflows")

ACTION_EDIT = "edit"
ACTION_SUBMIT_ACTION_PLAN = "submit_action_plan"
ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"

# Creation has no from-state, so it is gated outside the table.
CREATE_ROLES: tuple[str, ...] = (Role.LEAD_AUDITOR.value, Role.AUDITOR.value)

_OPEN = FindingStatus.OPEN.value
_SUBMITTED = FindingStatus.ACTION_PLAN_SUBMITTED.value
_REJECTED = FindingStatus.REJECTED.value
_REOPENED = FindingStatus.REOPENED.value
_CLOSED = FindingStatus.CLOSED.value
_VALIDATED = FindingStatus.VALIDATED.value

_AUDITORS = (Role.LEAD_AUDITOR.value, Role.AUDITOR.value)
_AUDITEE = (Role.AUDITEE.value,)
_LEAD = (Role.LEAD_AUDITOR.value,)


FINDING_WORKFLOW = Workflow(
    name="ncar_finding",
    description="Non-conformance finding corrective-action lifecycle",
    initial_state=_OPEN,
    states=(_OPEN, _SUBMITTED, _REJECTED, _VALIDATED, _CLOSED, _REOPENED),
    terminal_states=(_CLOSED, _VALIDATED),
    transitions=(
        Transition(_OPEN, _OPEN, action=ACTION_EDIT, roles=_AUDITORS),
        Transition(_OPEN, _SUBMITTED, action=ACTION_SUBMIT_ACTION_PLAN, roles=_AUDITEE),
        Transition(_REOPENED, _SUBMITTED, action=ACTION_SUBMIT_ACTION_PLAN, roles=_AUDITEE),
        Transition(_REJECTED, _SUBMITTED, action=ACTION_SUBMIT_ACTION_PLAN, roles=_AUDITEE),
        Transition(_SUBMITTED, _CLOSED, action=ACTION_APPROVE, roles=_LEAD),
        Transition(_SUBMITTED, _REOPENED, action=ACTION_REJECT, roles=_LEAD),
    ),
)

logger.info(
    "finding_workflow_registered",
    extra={
        "workflow_name": FINDING_WORKFLOW.name,
        "state_count": len(FINDING_WORKFLOW.states),
        "transition_count": len(FINDING_WORKFLOW.transitions),
        "initial_state": FINDING_WORKFLOW.initial_state,
    },
)
