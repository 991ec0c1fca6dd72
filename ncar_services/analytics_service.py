"""
ncar_services.analytics_service -- Read-side analytics facade.

Responsibility:
    Holds the process-wide overdue threshold and scoring weights (from
    configuration) and feeds store snapshots into the pure KPI, summary
    and TAT engines.  This is the only mutable holder of the threshold;
    engines always receive it as an explicit argument.

Architecture position:
    Services layer.  Reads ``FindingStore`` / ``ActionPlanStore``
    snapshots, never writes them.

Invariants enforced:
    - The overdue threshold is never negative.
    - KPIs see the *current* action plan of each finding, not the full
      resubmission history.
    - Every call reads a fresh snapshot; nothing is cached.

Failure modes:
    - ``ValidationError`` from ``set_overdue_threshold`` for a negative
      or non-integer value.
"""

from __future__ import annotations

from datetime import datetime

from ncar_config.schema import NcarConfig
from ncar_engines.kpi import (
    DepartmentHeadKpi,
    ManagerKpi,
    RollupKpi,
    ScoringWeights,
    compute_department_head_kpis,
    compute_manager_kpis,
    compute_rollup_kpis,
)
from ncar_engines.summary import (
    AreaCounts,
    FindingSummary,
    area_breakdown,
    summarize_findings,
)
from ncar_engines.tat import is_overdue
from ncar_kernel.domain.clock import Clock, SystemClock
from ncar_kernel.domain.directory import UserDirectory
from ncar_kernel.domain.records import Finding
from ncar_kernel.domain.values import AuditType
from ncar_kernel.exceptions import ValidationError
from ncar_kernel.logging_config import get_logger
from ncar_services.stores import ActionPlanStore, FindingStore

logger = get_logger("services.analytics")


class AnalyticsService:
    """
    Dashboard analytics over the live stores.

    Contract:
        ``directory`` is the externally supplied user snapshot; replace it
        with ``set_directory`` when the user list changes.
    """

    def __init__(
        self,
        findings: FindingStore,
        action_plans: ActionPlanStore,
        directory: UserDirectory | None = None,
        config: NcarConfig | None = None,
        clock: Clock | None = None,
    ):
        config = config or NcarConfig()
        self._findings = findings
        self._action_plans = action_plans
        self._directory = directory or UserDirectory(())
        self._clock = clock or SystemClock()
        self._threshold_days = config.overdue_threshold_days
        self._areas = config.areas
        self._weights = ScoringWeights(
            base_score=config.scoring.base_score,
            escalation_penalty=config.scoring.escalation_penalty,
            open_penalty=config.scoring.open_penalty,
        )

    @property
    def overdue_threshold_days(self) -> int:
        return self._threshold_days

    def set_overdue_threshold(self, days: int) -> None:
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            raise ValidationError(
                "overdue threshold",
                reason=f"must be a non-negative integer, got {days!r}",
            )
        old = self._threshold_days
        self._threshold_days = days
        logger.info(
            "overdue_threshold_changed",
            extra={"old_threshold_days": old, "new_threshold_days": days},
        )

    def set_directory(self, directory: UserDirectory) -> None:
        self._directory = directory

    def is_overdue(self, finding: Finding, now: datetime | None = None) -> bool:
        return is_overdue(
            finding,
            self._threshold_days,
            now if now is not None else self._clock.now(),
        )

    def overdue_findings(self, now: datetime | None = None) -> list[Finding]:
        now = now if now is not None else self._clock.now()
        return [f for f in self._findings.snapshot if self.is_overdue(f, now)]

    def manager_kpis(self, audit_type: AuditType | None = None) -> list[ManagerKpi]:
        return compute_manager_kpis(
            self._findings.snapshot,
            self._action_plans.current(),
            self._directory,
            audit_type=audit_type,
            weights=self._weights,
        )

    def department_head_kpis(
        self,
        audit_type: AuditType | None = None,
    ) -> list[DepartmentHeadKpi]:
        return compute_department_head_kpis(
            self.manager_kpis(audit_type), self._directory,
        )

    def rollup_kpis(self, audit_type: AuditType | None = None) -> list[RollupKpi]:
        return compute_rollup_kpis(self.manager_kpis(audit_type), self._directory)

    def summary(
        self,
        audit_type: AuditType | None = None,
        now: datetime | None = None,
    ) -> FindingSummary:
        return summarize_findings(
            self._findings.snapshot,
            threshold_days=self._threshold_days,
            now=now if now is not None else self._clock.now(),
            audit_type=audit_type,
        )

    def area_breakdown(self) -> list[AreaCounts]:
        return area_breakdown(self._findings.snapshot, self._areas)
