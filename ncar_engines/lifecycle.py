"""
ncar_engines.lifecycle -- Pure transition-table evaluation.

Responsibility:
    Decide whether ``(current_state, action, role)`` is a legal move in a
    workflow and, if so, which state it leads to.  Works for any
    ``Workflow`` (findings, audit plans).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ncar_kernel/domain types.

Invariants enforced:
    - The workflow table is the only source of legal moves; there is no
      fallback for unknown actions.
    - Missing transition is reported before role mismatch, so callers can
      tell "never legal here" apart from "legal, but not for you".

Failure modes:
    - Never raises.  Illegal moves come back as a failed
      ``TransitionResult`` with outcome ``no_transition`` or
      ``permission_denied``; the executor decides what to do with them.
"""

from __future__ import annotations

from ncar_kernel.domain.workflow import TransitionResult, Workflow

OUTCOME_SUCCESS = "success"
OUTCOME_NO_TRANSITION = "no_transition"
OUTCOME_PERMISSION_DENIED = "permission_denied"


def evaluate_transition(
    workflow: Workflow,
    from_state: str,
    action: str,
    role: str,
) -> TransitionResult:
    """Evaluate one command against a workflow table.

    Args:
        workflow: The state machine definition.
        from_state: The record's current status value.
        action: The command name (e.g. ``approve``).
        role: The actor's role value.

    Returns:
        TransitionResult with ``success`` and ``to_state`` populated when
        the move is legal for the role.
    """
    transition = workflow.find(from_state, action)
    if transition is None:
        return TransitionResult(
            success=False,
            workflow=workflow.name,
            action=action,
            from_state=from_state,
            outcome=OUTCOME_NO_TRANSITION,
            reason=f"No '{action}' transition from '{from_state}'",
        )

    if not transition.permits(role):
        return TransitionResult(
            success=False,
            workflow=workflow.name,
            action=action,
            from_state=from_state,
            to_state=transition.to_state,
            outcome=OUTCOME_PERMISSION_DENIED,
            reason=f"Role '{role}' not in {list(transition.roles)}",
        )

    return TransitionResult(
        success=True,
        workflow=workflow.name,
        action=action,
        from_state=from_state,
        to_state=transition.to_state,
        outcome=OUTCOME_SUCCESS,
    )


def reachable_states(workflow: Workflow) -> frozenset[str]:
    """All states reachable from the workflow's initial state."""
    reachable = {workflow.initial_state}
    changed = True
    while changed:
        changed = False
        for t in workflow.transitions:
            if t.from_state in reachable and t.to_state not in reachable:
                reachable.add(t.to_state)
                changed = True
    return frozenset(reachable)
