"""
Module: ncar_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (ncar_services, ncar_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ncar_kernel (and sibling engine modules).
    MUST NOT import ncar_services, ncar_modules or ncar_config.

Invariants enforced:
    - Purity: engines never read a clock.  ``now`` and the overdue
      threshold are explicit parameters supplied by services.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    KPI and summary engines are traced via ``@traced_engine`` (see
    ``ncar_engines.tracer``), emitting NCAR_ENGINE_TRACE log records.

Usage:
    from ncar_engines import compute_manager_kpis, days_remaining
"""

from ncar_engines.filters import (
    STATUS_GROUPS,
    VALIDATION_QUEUE_STATUSES,
    VALIDATION_STATUS_GROUPS,
    StatusFilter,
    filter_audit_plans,
    filter_findings,
    validation_queue,
)
from ncar_engines.kpi import (
    DEFAULT_WEIGHTS,
    DepartmentHeadKpi,
    ManagerKpi,
    RollupKpi,
    ScoringWeights,
    compute_department_head_kpis,
    compute_manager_kpis,
    compute_rollup_kpis,
)
from ncar_engines.lifecycle import evaluate_transition, reachable_states
from ncar_engines.summary import (
    DEFAULT_AREAS,
    AreaCounts,
    FindingSummary,
    ProcessCounts,
    area_breakdown,
    process_noncompliance,
    severity_distribution,
    summarize_findings,
    tat_by_audit_type,
)
from ncar_engines.tat import (
    average_days,
    days_between,
    days_open,
    days_remaining,
    is_overdue,
    response_days,
    round_half_up,
)
from ncar_engines.tracer import traced_engine

__all__ = [
    "DEFAULT_AREAS",
    "DEFAULT_WEIGHTS",
    "STATUS_GROUPS",
    "VALIDATION_QUEUE_STATUSES",
    "VALIDATION_STATUS_GROUPS",
    "AreaCounts",
    "DepartmentHeadKpi",
    "FindingSummary",
    "ManagerKpi",
    "ProcessCounts",
    "RollupKpi",
    "ScoringWeights",
    "StatusFilter",
    "area_breakdown",
    "average_days",
    "compute_department_head_kpis",
    "compute_manager_kpis",
    "compute_rollup_kpis",
    "days_between",
    "days_open",
    "days_remaining",
    "evaluate_transition",
    "filter_audit_plans",
    "filter_findings",
    "is_overdue",
    "process_noncompliance",
    "reachable_states",
    "response_days",
    "round_half_up",
    "severity_distribution",
    "summarize_findings",
    "tat_by_audit_type",
    "traced_engine",
    "validation_queue",
]
