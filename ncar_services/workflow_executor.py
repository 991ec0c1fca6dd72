"""
ncar_services.workflow_executor -- Workflow transition execution.

Responsibility:
    Asks the pure lifecycle engine whether ``(current_state, action, role)``
    is legal, emits a structured ``workflow_transition`` record for every
    attempt, and applies the caller's strictness policy to failed
    attempts.  Thin coordinator -- the transition table lives in the
    workflow definitions, evaluation in ``ncar_engines.lifecycle``.

Architecture position:
    Services layer.  May import from ncar_engines/ (pure engines) and
    ncar_kernel/ (domain, exceptions, logging).

Invariants enforced:
    - Every attempt is traced, including no-ops.
    - Lenient mode never raises for an illegal move; strict mode raises
      InvalidTransitionError (no transition from the state) or
      PermissionDeniedError (transition exists, role not allowed).
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable

from ncar_engines.lifecycle import (
    OUTCOME_NO_TRANSITION,
    OUTCOME_PERMISSION_DENIED,
    evaluate_transition,
)
from ncar_kernel.domain.workflow import TransitionResult, Workflow
from ncar_kernel.exceptions import InvalidTransitionError, PermissionDeniedError
from ncar_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.workflow_executor")

TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _emit_workflow_trace(
    result: TransitionResult,
    entity_id: str,
    role: str,
    duration_ms: float,
    outcome_sink: Callable[[dict], None] | None = None,
) -> None:
    """Emit a structured workflow transition record."""
    record: dict[str, Any] = {
        "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
        "workflow": result.workflow,
        "action": result.action,
        "entity_id": entity_id,
        "from_state": result.from_state,
        "role": role,
        "outcome": result.outcome,
        "reason": result.reason,
        "duration_ms": round(duration_ms, 3),
    }
    if result.to_state is not None:
        record["to_state"] = result.to_state
    record.update(LogContext.get_all())
    if result.success:
        logger.info("workflow_transition", extra=record)
    else:
        logger.warning("workflow_transition", extra=record)
    if outcome_sink is not None:
        outcome_sink(record)


class WorkflowExecutor:
    """Executes workflow transitions against a role-gated table.

    Args:
        strict: Default strictness for ``execute`` calls that do not pass
            one explicitly.
        outcome_sink: Optional callable receiving every trace record
            (used by tests and timelines).
    """

    def __init__(
        self,
        strict: bool = False,
        outcome_sink: Callable[[dict], None] | None = None,
    ) -> None:
        self._strict = strict
        self._outcome_sink = outcome_sink

    @property
    def strict(self) -> bool:
        return self._strict

    def execute(
        self,
        workflow: Workflow,
        entity_id: str,
        current_state: str,
        action: str,
        actor_role: str,
        strict: bool | None = None,
    ) -> TransitionResult:
        """Evaluate one command.

        Returns:
            The TransitionResult.  In lenient mode a failed result means
            the caller must leave its store untouched.

        Raises:
            InvalidTransitionError: strict mode, no transition from state.
            PermissionDeniedError: strict mode, role not allowed.
        """
        t0 = time.monotonic()
        state = _plain(current_state)
        role = _plain(actor_role)
        result = evaluate_transition(workflow, state, action, role)
        _emit_workflow_trace(
            result,
            entity_id=entity_id,
            role=role,
            duration_ms=(time.monotonic() - t0) * 1000,
            outcome_sink=self._outcome_sink,
        )

        if result.success or not (self._strict if strict is None else strict):
            return result

        if result.outcome == OUTCOME_NO_TRANSITION:
            raise InvalidTransitionError(workflow.name, action, state)
        if result.outcome == OUTCOME_PERMISSION_DENIED:
            raise PermissionDeniedError(workflow.name, action, state, role)
        return result
