"""
Canonical workflow types (``ncar_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for lifecycle state machines.  Used by the finding
workflow and the audit-plan workflow so that Transition, Workflow
and TransitionResult are defined once.  Each transition names the roles
allowed to fire it, so a workflow is a table keyed by
``(from_state, action, role)``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``ncar_services``, ``ncar_modules``, or ``ncar_config``.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* At most one transition exists per ``(from_state, action)`` pair, so the
  lookup is deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Transition:
    """A legal state transition.

    ``roles`` lists the actor roles allowed to fire it; an empty tuple
    means any role.  Self-transitions (``from_state == to_state``) model
    commands that mutate a record without moving it, such as edits.
    """
    from_state: str
    to_state: str
    action: str
    roles: tuple[str, ...] = ()

    def permits(self, role: str) -> bool:
        return not self.roles or role in self.roles


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    ``terminal_states`` are states with no outgoing transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state!r} "
                f"not in states"
            )
        seen: set[tuple[str, str]] = set()
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action!r} "
                    f"references unknown state ({t.from_state} -> {t.to_state})"
                )
            key = (t.from_state, t.action)
            if key in seen:
                raise ValueError(
                    f"Workflow {self.name}: duplicate transition {key}"
                )
            seen.add(key)

    def find(self, from_state: str, action: str) -> Transition | None:
        """Return the transition for ``(from_state, action)``, if any."""
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        return None

    def transitions_from(self, state: str) -> tuple[Transition, ...]:
        return tuple(t for t in self.transitions if t.from_state == state)

    def successors(self, state: str) -> frozenset[str]:
        """States reachable in one step from ``state``, excluding itself."""
        return frozenset(
            t.to_state for t in self.transitions_from(state)
            if t.to_state != state
        )

    def actions_for(self, state: str, role: str) -> tuple[str, ...]:
        """Actions the given role may perform from ``state``."""
        return tuple(
            t.action for t in self.transitions_from(state) if t.permits(role)
        )


@dataclass(frozen=True)
class TransitionResult:
    """Result of evaluating a command against a workflow.

    ``outcome`` is one of ``success``, ``permission_denied`` or
    ``no_transition``.  Callers decide whether a failed result is a silent
    no-op or a raised error.
    """

    success: bool
    workflow: str
    action: str
    from_state: str
    to_state: str | None = None
    outcome: str = "success"
    reason: str = ""
