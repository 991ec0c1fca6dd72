"""
Kernel Invariants Contract.

These invariants are structural law for the finding lifecycle.  No
configuration value or strict/lenient mode may override them.

This module exists solely to declare them explicitly.  Enforcement is
distributed across the workflow definitions, the module services, the
stores, and the user directory.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the core.

    Configuration may change *how* violations surface (silent no-op or
    typed error), never *whether* these rules apply.
    """

    ROLE_GATED_TRANSITIONS = "role_gated_transitions"
    """Status changes happen only through a workflow transition whose
    roles include the actor's role.  Enforced by WorkflowExecutor."""

    FIRST_RESPONSE_STAMP = "first_response_stamp"
    """``response_at`` is stamped on the first action-plan submission and
    never overwritten.  Enforced by FindingService.submit_action_plan."""

    REMARKS_IFF_REOPENED = "remarks_iff_reopened"
    """``rejection_remarks`` is present only while a finding is reopened
    or rejected.  Enforced by FindingService approve/reject/submit."""

    MONOTONIC_AUDIT_PLAN = "monotonic_audit_plan"
    """Audit plans only move forward one stage at a time.  Enforced by
    AUDIT_PLAN_WORKFLOW, which has no backward transitions."""

    WHOLE_COLLECTION_REPLACE = "whole_collection_replace"
    """Stores never update a record in place; every mutation swaps the
    whole immutable collection.  Enforced by ncar_services.stores."""

    ACYCLIC_REPORTING = "acyclic_reporting"
    """The reports_to relation is a forest.  Enforced by UserDirectory."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_layer_boundaries.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "ncar_engines",
    "ncar_services",
    "ncar_config",
    "ncar_modules",
)

# Engines are pure: no stores, services, modules or config.
FORBIDDEN_ENGINE_IMPORTS: tuple[str, ...] = (
    "ncar_services",
    "ncar_config",
    "ncar_modules",
)
