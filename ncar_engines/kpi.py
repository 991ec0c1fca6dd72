"""
Module: ncar_engines.kpi
Responsibility:
    Cascading compliance KPIs.  Scores every manager from the findings
    raised against them and the action plans they own, then rolls those
    scores up to department heads (two-level, for dashboard parity) and,
    recursively, to every superior in the reporting tree.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ncar_kernel/domain types and sibling engines.

Invariants enforced:
    - Purity: every function is a deterministic function of its inputs;
      nothing is cached or mutated.
    - Score floor: ``score >= 0`` regardless of penalty totals.
    - Empty-set defaults: ``cap_timeliness == 100`` with no action plans,
      ``avg_manager_score == 100`` with no reporting managers,
      ``avg_response_tat is None`` with no responded findings.
    - Rounding is half-up (``ROUND_HALF_UP``) everywhere.

Failure modes:
    - ValueError from ``ScoringWeights`` when a weight is negative.

Usage:
    from ncar_engines.kpi import compute_manager_kpis, compute_department_head_kpis

    managers = compute_manager_kpis(findings, plans, users)
    heads = compute_department_head_kpis(managers, users)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from ncar_engines.tat import average_days, response_days, round_half_up
from ncar_engines.tracer import traced_engine
from ncar_kernel.domain.directory import User, UserDirectory
from ncar_kernel.domain.records import ActionPlan, Finding
from ncar_kernel.domain.values import AuditType, Designation, FindingStatus
from ncar_kernel.logging_config import get_logger

logger = get_logger("engines.kpi")


@dataclass(frozen=True)
class ScoringWeights:
    """Penalty weights for the manager score.

    ``score = max(0, base_score - escalation_penalty * escalated
    - open_penalty * not_closed)``
    """
    base_score: int = 100
    escalation_penalty: int = 20
    open_penalty: int = 5

    def __post_init__(self) -> None:
        if self.base_score < 0:
            raise ValueError("base_score cannot be negative")
        if self.escalation_penalty < 0:
            raise ValueError("escalation_penalty cannot be negative")
        if self.open_penalty < 0:
            raise ValueError("open_penalty cannot be negative")

    def score(self, escalated: int, not_closed: int) -> int:
        return max(
            0,
            self.base_score
            - self.escalation_penalty * escalated
            - self.open_penalty * not_closed,
        )


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class ManagerKpi:
    """Per-manager compliance KPIs.

    ``avg_response_tat`` is None when none of the manager's findings has
    been responded to ("not applicable").
    """
    manager_id: str
    name: str
    dept: str
    reports_to: str | None
    total_ncars: int
    escalated: int
    not_closed: int
    avg_response_tat: Decimal | None
    total_action_plans: int
    timely_action_plans: int
    cap_timeliness: int
    score: int


@dataclass(frozen=True)
class DepartmentHeadKpi:
    """Department-head KPIs cascaded from directly reporting managers."""
    head_id: str
    name: str
    dept: str
    manager_count: int
    avg_manager_score: int
    total_escalated: int


@dataclass(frozen=True)
class RollupKpi:
    """KPIs for any superior, aggregated over every manager in the subtree.

    ``depth`` is the number of reporting levels down to the deepest
    scored manager (1 for a direct report).
    """
    user_id: str
    name: str
    dept: str
    designation: Designation
    manager_count: int
    avg_score: int
    total_escalated: int
    depth: int


def filter_by_audit_type(
    findings: Iterable[Finding],
    audit_type: AuditType | None,
) -> list[Finding]:
    """Pre-filter findings by audit type; None keeps everything."""
    if audit_type is None:
        return list(findings)
    return [f for f in findings if f.audit_type == audit_type]


def _mean_score(scores: Sequence[int]) -> int:
    return int(round_half_up(Decimal(sum(scores)) / Decimal(len(scores))))


@traced_engine("kpi.manager", "1.0", fingerprint_fields=("audit_type",))
def compute_manager_kpis(
    findings: Iterable[Finding],
    action_plans: Iterable[ActionPlan],
    users: Iterable[User],
    audit_type: AuditType | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[ManagerKpi]:
    """Score every user whose designation is Manager.

    Findings are matched to a manager by ``auditee == manager.name`` and
    optionally pre-filtered by ``audit_type``.  Action plans are matched by
    ``responsible_person == manager.name`` and are never filtered by audit
    type.

    Returns:
        One ManagerKpi per manager, in directory order.
    """
    scoped = filter_by_audit_type(findings, audit_type)
    plans = list(action_plans)

    results: list[ManagerKpi] = []
    for manager in users:
        if manager.designation != Designation.MANAGER:
            continue

        owned = [f for f in scoped if f.auditee == manager.name]
        escalated = sum(1 for f in owned if f.is_escalated)
        not_closed = sum(1 for f in owned if f.status != FindingStatus.CLOSED)
        avg_tat = average_days(
            response_days(f.created_at, f.response_at)
            for f in owned
            if f.response_at is not None
        )

        manager_plans = [p for p in plans if p.responsible_person == manager.name]
        timely = sum(1 for p in manager_plans if p.is_timely)
        if manager_plans:
            cap_timeliness = int(round_half_up(
                Decimal(100) * timely / Decimal(len(manager_plans))
            ))
        else:
            cap_timeliness = 100

        results.append(ManagerKpi(
            manager_id=manager.id,
            name=manager.name,
            dept=manager.dept,
            reports_to=manager.reports_to,
            total_ncars=len(owned),
            escalated=escalated,
            not_closed=not_closed,
            avg_response_tat=avg_tat,
            total_action_plans=len(manager_plans),
            timely_action_plans=timely,
            cap_timeliness=cap_timeliness,
            score=weights.score(escalated, not_closed),
        ))

    logger.debug(
        "manager_kpis_computed",
        extra={
            "manager_count": len(results),
            "finding_count": len(scoped),
            "audit_type": audit_type,
        },
    )
    return results


@traced_engine("kpi.department_head", "1.0")
def compute_department_head_kpis(
    manager_kpis: Sequence[ManagerKpi],
    users: Iterable[User],
) -> list[DepartmentHeadKpi]:
    """Cascade manager scores to department heads.

    Only managers whose ``reports_to`` is the head's id count; deeper
    chains are the job of ``compute_rollup_kpis``.
    """
    results: list[DepartmentHeadKpi] = []
    for head in users:
        if head.designation != Designation.DEPARTMENT_HEAD:
            continue
        reporting = [m for m in manager_kpis if m.reports_to == head.id]
        avg = _mean_score([m.score for m in reporting]) if reporting else 100
        results.append(DepartmentHeadKpi(
            head_id=head.id,
            name=head.name,
            dept=head.dept,
            manager_count=len(reporting),
            avg_manager_score=avg,
            total_escalated=sum(m.escalated for m in reporting),
        ))
    return results


@traced_engine("kpi.rollup", "1.0")
def compute_rollup_kpis(
    manager_kpis: Sequence[ManagerKpi],
    directory: UserDirectory,
) -> list[RollupKpi]:
    """Aggregate manager scores up the whole reporting tree.

    Every superior with at least one scored manager beneath them (at any
    depth) gets a RollupKpi over that subtree.  A user's own ManagerKpi is
    not part of their rollup.  The directory guarantees the tree is
    acyclic, so every chain walk terminates.
    """
    buckets: dict[str, list[ManagerKpi]] = {}
    depths: dict[str, int] = {}
    for kpi in manager_kpis:
        for level, superior in enumerate(directory.chain_of_command(kpi.manager_id), 1):
            buckets.setdefault(superior.id, []).append(kpi)
            depths[superior.id] = max(depths.get(superior.id, 0), level)

    results: list[RollupKpi] = []
    for user in directory:
        subtree = buckets.get(user.id)
        if not subtree:
            continue
        results.append(RollupKpi(
            user_id=user.id,
            name=user.name,
            dept=user.dept,
            designation=user.designation,
            manager_count=len(subtree),
            avg_score=_mean_score([m.score for m in subtree]),
            total_escalated=sum(m.escalated for m in subtree),
            depth=depths[user.id],
        ))
    return results
