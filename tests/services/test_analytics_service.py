"""
Tests for AnalyticsService and the tracker orchestrator wiring.

Covers:
- overdue threshold: default from config, validation, effect on queries
- KPIs read the current action plan only
- summary and area breakdown read live snapshots
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from ncar_config.schema import NcarConfig, ScoringConfig
from ncar_kernel.domain.clock import DeterministicClock
from ncar_kernel.domain.records import ActionPlan, Finding
from ncar_kernel.domain.values import AuditType, FindingStatus, FindingType
from ncar_kernel.exceptions import ValidationError
from ncar_services.analytics_service import AnalyticsService
from ncar_services.notifications import CollectingNotificationSink
from ncar_services.orchestrator import TrackerOrchestrator, build_tracker_orchestrator
from ncar_services.stores import ActionPlanStore, FindingStore

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_finding(
    finding_id: str = "NCAR_000001_202401",
    status: FindingStatus = FindingStatus.OPEN,
    area: str = "TSD",
    is_escalated: bool = False,
    audit_type: AuditType = AuditType.QUALITY_INFOSEC,
) -> Finding:
    return Finding(
        id=finding_id,
        statement="Backups not tested",
        requirement="ISO 27001 A.8.13",
        evidence="No restore test in 2023",
        finding_type=FindingType.MAJOR,
        area=area,
        auditor="Arun Auditor",
        auditee="Mark Manager",
        created_at=T0,
        deadline=T0 + timedelta(days=7),
        status=status,
        audit_type=audit_type,
        is_escalated=is_escalated,
    )


def make_plan(plan_id: str, completed_at: datetime | None) -> ActionPlan:
    return ActionPlan(
        id=plan_id,
        ncar_id="NCAR_000001_202401",
        immediate_correction="Ran a restore",
        root_cause="No schedule",
        corrective_action="Quarterly restore test",
        responsible_person="Mark Manager",
        due_date=date(2024, 1, 10),
        submitted_at=T0,
        completed_at=completed_at,
    )


@pytest.fixture
def clock():
    return DeterministicClock(T0)


@pytest.fixture
def analytics(directory, clock):
    return AnalyticsService(FindingStore(), ActionPlanStore(), directory, clock=clock)


class TestOverdueThreshold:

    def test_default_from_config(self, directory):
        service = AnalyticsService(
            FindingStore(), ActionPlanStore(), directory,
            config=NcarConfig(overdue_threshold_days=9),
        )
        assert service.overdue_threshold_days == 9

    @pytest.mark.parametrize("bad", [-1, 2.5, "5", True])
    def test_invalid_threshold_rejected(self, analytics, bad):
        with pytest.raises(ValidationError):
            analytics.set_overdue_threshold(bad)
        assert analytics.overdue_threshold_days == 5

    def test_change_is_logged(self, analytics, captured_logs):
        analytics.set_overdue_threshold(3)
        (record,) = [
            r for r in captured_logs() if r["message"] == "overdue_threshold_changed"
        ]
        assert record["old_threshold_days"] == 5
        assert record["new_threshold_days"] == 3

    def test_threshold_drives_overdue_queries(self, directory, clock):
        findings = FindingStore([make_finding()])
        service = AnalyticsService(findings, ActionPlanStore(), directory, clock=clock)
        clock.advance_days(4)
        assert service.overdue_findings() == []
        service.set_overdue_threshold(3)
        assert [f.id for f in service.overdue_findings()] == ["NCAR_000001_202401"]
        assert service.summary().overdue == 1

    def test_zero_threshold(self, analytics):
        analytics.set_overdue_threshold(0)
        assert analytics.overdue_threshold_days == 0


class TestKpis:

    def test_uses_current_plan_only(self, directory, clock):
        late = datetime(2024, 1, 15, tzinfo=timezone.utc)
        on_time = datetime(2024, 1, 8, tzinfo=timezone.utc)
        plans = ActionPlanStore([
            make_plan("ACT_000001_202401", late),
            make_plan("ACT_000002_202401", on_time),
        ])
        service = AnalyticsService(
            FindingStore([make_finding()]), plans, directory, clock=clock,
        )
        mark = next(k for k in service.manager_kpis() if k.name == "Mark Manager")
        assert mark.total_action_plans == 1
        assert mark.cap_timeliness == 100

    def test_scoring_weights_from_config(self, directory, clock):
        config = NcarConfig(scoring=ScoringConfig(base_score=10, escalation_penalty=0, open_penalty=1))
        service = AnalyticsService(
            FindingStore([make_finding(is_escalated=True)]), ActionPlanStore(),
            directory, config=config, clock=clock,
        )
        mark = next(k for k in service.manager_kpis() if k.name == "Mark Manager")
        assert mark.score == 9

    def test_head_and_rollup_views(self, directory, clock):
        service = AnalyticsService(
            FindingStore([make_finding(is_escalated=True)]), ActionPlanStore(),
            directory, clock=clock,
        )
        head = next(h for h in service.department_head_kpis() if h.head_id == "U10")
        rollup = next(r for r in service.rollup_kpis() if r.user_id == "U10")
        assert head.total_escalated == rollup.total_escalated == 1

    def test_audit_type_filter_passed_through(self, directory, clock):
        service = AnalyticsService(
            FindingStore([make_finding(audit_type=AuditType.FINANCIAL)]),
            ActionPlanStore(), directory, clock=clock,
        )
        mark = next(
            k for k in service.manager_kpis(AuditType.SPECIAL_REQUEST)
            if k.name == "Mark Manager"
        )
        assert mark.total_ncars == 0

    def test_empty_directory(self, clock):
        service = AnalyticsService(FindingStore(), ActionPlanStore(), clock=clock)
        assert service.manager_kpis() == []

    def test_set_directory(self, directory, clock):
        service = AnalyticsService(FindingStore(), ActionPlanStore(), clock=clock)
        service.set_directory(directory)
        assert len(service.manager_kpis()) == 3


class TestSnapshots:

    def test_reads_fresh_snapshot_each_call(self, directory, clock):
        findings = FindingStore()
        service = AnalyticsService(findings, ActionPlanStore(), directory, clock=clock)
        assert service.summary().total == 0
        findings.add(make_finding())
        assert service.summary().total == 1

    def test_area_breakdown_uses_config_areas(self, directory, clock):
        service = AnalyticsService(
            FindingStore([make_finding(area="QA")]), ActionPlanStore(), directory,
            config=NcarConfig(areas=("QA", "OPS")), clock=clock,
        )
        rows = service.area_breakdown()
        assert [r.area for r in rows] == ["QA", "OPS"]
        assert rows[0].ncars == 1


class TestOrchestrator:

    def test_strictness_from_config(self):
        orchestrator = TrackerOrchestrator(NcarConfig(strict_transitions=True))
        assert orchestrator.workflow_executor.strict is True

    def test_override_strictness(self):
        orchestrator = TrackerOrchestrator(NcarConfig(strict_transitions=True), strict=False)
        assert orchestrator.workflow_executor.strict is False

    def test_analytics_shares_stores(self, directory, clock):
        orchestrator = TrackerOrchestrator(
            NcarConfig(), clock=clock, notifier=CollectingNotificationSink(),
            directory=directory,
        )
        orchestrator.findings.add(make_finding())
        assert orchestrator.analytics.summary().total == 1

    def test_build_loads_default_config(self, captured_logs):
        orchestrator = build_tracker_orchestrator()
        assert orchestrator.config.overdue_threshold_days == 5
        assert any(r["message"] == "NCAR_CONFIG_TRACE" for r in captured_logs())
