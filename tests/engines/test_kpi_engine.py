"""
Tests for the KPI aggregation engine.

Tests cover:
- compute_manager_kpis: matching by name, score formula and floor,
  response TAT, CAP timeliness, audit-type filtering
- compute_department_head_kpis: direct reports only, empty default
- compute_rollup_kpis: multi-level trees, agreement with the two-level
  rollup on a two-level chart
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ncar_engines.kpi import (
    ScoringWeights,
    compute_department_head_kpis,
    compute_manager_kpis,
    compute_rollup_kpis,
)
from ncar_kernel.domain.directory import User, UserDirectory
from ncar_kernel.domain.records import ActionPlan, Finding
from ncar_kernel.domain.values import (
    AuditType,
    Designation,
    FindingStatus,
    FindingType,
    Role,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# =========================================================================
# Factory helpers
# =========================================================================


_seq = iter(range(1, 10_000))


def make_finding(
    auditee: str = "Mark Manager",
    status: FindingStatus = FindingStatus.OPEN,
    is_escalated: bool = False,
    response_at: datetime | None = None,
    audit_type: AuditType = AuditType.QUALITY_INFOSEC,
) -> Finding:
    return Finding(
        id=f"NCAR_{next(_seq):06d}_202401",
        statement="Procedure not followed",
        requirement="ISO 9001 8.5.1",
        evidence="Work order WO-7 missing sign-off",
        finding_type=FindingType.MINOR,
        area="TSD",
        auditor="Arun Auditor",
        auditee=auditee,
        created_at=T0,
        deadline=T0 + timedelta(days=7),
        status=status,
        audit_type=audit_type,
        is_escalated=is_escalated,
        response_at=response_at,
    )


def make_plan(
    responsible_person: str = "Mark Manager",
    due_date: date = date(2024, 1, 10),
    completed_at: datetime | None = None,
) -> ActionPlan:
    return ActionPlan(
        id=f"ACT_{next(_seq):06d}_202401",
        ncar_id="NCAR_000001_202401",
        immediate_correction="Signed off WO-7",
        root_cause="Checklist skipped",
        corrective_action="Add sign-off gate",
        responsible_person=responsible_person,
        due_date=due_date,
        submitted_at=T0,
        completed_at=completed_at,
    )


def make_user(
    user_id: str,
    name: str,
    designation: Designation = Designation.MANAGER,
    reports_to: str | None = None,
) -> User:
    return User(user_id, name, Role.AUDITEE, "TSD", designation, reports_to=reports_to)


def kpi_for(kpis, name):
    return next(k for k in kpis if k.name == name)


# =========================================================================
# Manager KPIs
# =========================================================================


class TestManagerKpis:

    def test_only_managers_are_scored(self, users):
        kpis = compute_manager_kpis([], [], users)
        assert [k.name for k in kpis] == ["Mark Manager", "Mia Manager", "Cora Manager"]

    def test_scenario_score_seventy(self, users):
        """3 findings, 1 escalated, 2 not closed -> 100 - 20 - 10."""
        findings = [
            make_finding(status=FindingStatus.CLOSED, is_escalated=True),
            make_finding(status=FindingStatus.OPEN),
            make_finding(status=FindingStatus.ACTION_PLAN_SUBMITTED),
        ]
        kpi = kpi_for(compute_manager_kpis(findings, [], users), "Mark Manager")
        assert kpi.total_ncars == 3
        assert kpi.escalated == 1
        assert kpi.not_closed == 2
        assert kpi.score == 70

    def test_score_never_negative(self, users):
        findings = [make_finding(is_escalated=True) for _ in range(10)]
        findings += [make_finding() for _ in range(40)]
        kpi = kpi_for(compute_manager_kpis(findings, [], users), "Mark Manager")
        assert kpi.escalated == 10
        assert kpi.not_closed == 50
        assert kpi.score == 0

    def test_validated_counts_as_not_closed(self, users):
        findings = [make_finding(status=FindingStatus.VALIDATED)]
        kpi = kpi_for(compute_manager_kpis(findings, [], users), "Mark Manager")
        assert kpi.not_closed == 1
        assert kpi.score == 95

    def test_findings_matched_by_auditee_name(self, users):
        findings = [make_finding(auditee="Mia Manager"), make_finding(auditee="Nobody")]
        kpis = compute_manager_kpis(findings, [], users)
        assert kpi_for(kpis, "Mark Manager").total_ncars == 0
        assert kpi_for(kpis, "Mia Manager").total_ncars == 1

    def test_no_findings_scores_full(self, users):
        kpi = kpi_for(compute_manager_kpis([], [], users), "Mark Manager")
        assert kpi.score == 100
        assert kpi.avg_response_tat is None

    def test_avg_response_tat_over_responded_only(self, users):
        findings = [
            make_finding(response_at=T0 + timedelta(days=1)),
            make_finding(response_at=T0 + timedelta(days=2, hours=1)),
            make_finding(),
        ]
        kpi = kpi_for(compute_manager_kpis(findings, [], users), "Mark Manager")
        # (1 + 3) / 2
        assert kpi.avg_response_tat == Decimal("2.0")

    def test_custom_weights(self, users):
        findings = [make_finding(is_escalated=True)]
        weights = ScoringWeights(base_score=50, escalation_penalty=10, open_penalty=1)
        kpi = kpi_for(
            compute_manager_kpis(findings, [], users, weights=weights),
            "Mark Manager",
        )
        assert kpi.score == 39

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            ScoringWeights(open_penalty=-1)


class TestCapTimeliness:

    def test_no_plans_is_one_hundred(self, users):
        kpi = kpi_for(compute_manager_kpis([], [], users), "Mark Manager")
        assert kpi.total_action_plans == 0
        assert kpi.cap_timeliness == 100

    def test_completed_on_due_date_is_timely(self, users):
        plans = [make_plan(completed_at=datetime(2024, 1, 10, 23, 0, tzinfo=timezone.utc))]
        kpi = kpi_for(compute_manager_kpis([], plans, users), "Mark Manager")
        assert kpi.cap_timeliness == 100

    def test_incomplete_plan_is_not_timely(self, users):
        plans = [make_plan()]
        kpi = kpi_for(compute_manager_kpis([], plans, users), "Mark Manager")
        assert kpi.cap_timeliness == 0

    def test_rounds_half_up(self, users):
        late = datetime(2024, 1, 11, 9, 0, tzinfo=timezone.utc)
        on_time = datetime(2024, 1, 9, 9, 0, tzinfo=timezone.utc)
        plans = [
            make_plan(completed_at=on_time),
            make_plan(completed_at=late),
            make_plan(completed_at=late),
            make_plan(completed_at=late),
            make_plan(completed_at=late),
            make_plan(completed_at=late),
            make_plan(completed_at=late),
            make_plan(completed_at=late),
        ]
        kpi = kpi_for(compute_manager_kpis([], plans, users), "Mark Manager")
        # 100 * 1 / 8 = 12.5
        assert kpi.cap_timeliness == 13

    def test_plans_not_filtered_by_audit_type(self, users):
        findings = [make_finding(audit_type=AuditType.FINANCIAL)]
        plans = [make_plan()]
        kpi = kpi_for(
            compute_manager_kpis(findings, plans, users, audit_type=AuditType.QUALITY_INFOSEC),
            "Mark Manager",
        )
        assert kpi.total_ncars == 0
        assert kpi.total_action_plans == 1


class TestAuditTypeFilter:

    def test_filter_restricts_findings(self, users):
        findings = [
            make_finding(audit_type=AuditType.FINANCIAL, is_escalated=True),
            make_finding(audit_type=AuditType.QUALITY_INFOSEC),
        ]
        kpis = compute_manager_kpis(findings, [], users, audit_type=AuditType.FINANCIAL)
        kpi = kpi_for(kpis, "Mark Manager")
        assert kpi.total_ncars == 1
        assert kpi.escalated == 1

    def test_none_keeps_all(self, users):
        findings = [
            make_finding(audit_type=AuditType.FINANCIAL),
            make_finding(audit_type=AuditType.SPECIAL_REQUEST),
        ]
        kpi = kpi_for(compute_manager_kpis(findings, [], users), "Mark Manager")
        assert kpi.total_ncars == 2


# =========================================================================
# Department-head KPIs
# =========================================================================


class TestDepartmentHeadKpis:

    def test_average_of_direct_reports(self, users):
        findings = [make_finding(is_escalated=True)]  # Mark: 100 - 20 - 5 = 75
        managers = compute_manager_kpis(findings, [], users)
        heads = compute_department_head_kpis(managers, users)
        tsd = next(h for h in heads if h.head_id == "U10")
        # (75 + 100) / 2 = 87.5 -> 88
        assert tsd.avg_manager_score == 88
        assert tsd.total_escalated == 1
        assert tsd.manager_count == 2

    def test_no_reporting_managers_is_one_hundred(self, users):
        managers = compute_manager_kpis([make_finding(auditee="Cora Manager")], [], users)
        heads = compute_department_head_kpis(managers, users)
        css = next(h for h in heads if h.head_id == "U20")
        assert css.manager_count == 0
        assert css.avg_manager_score == 100
        assert css.total_escalated == 0

    def test_two_level_only(self):
        users = [
            make_user("H", "Head", Designation.DEPARTMENT_HEAD),
            make_user("S", "Senior", Designation.MANAGER, reports_to="H"),
            make_user("J", "Junior", Designation.MANAGER, reports_to="S"),
        ]
        findings = [make_finding(auditee="Junior", is_escalated=True)]
        managers = compute_manager_kpis(findings, [], users)
        (head,) = compute_department_head_kpis(managers, users)
        assert head.manager_count == 1
        assert head.total_escalated == 0


# =========================================================================
# Recursive rollup
# =========================================================================


class TestRollupKpis:

    def test_matches_two_level_on_two_level_chart(self, users, directory):
        findings = [
            make_finding(is_escalated=True),
            make_finding(auditee="Mia Manager"),
        ]
        managers = compute_manager_kpis(findings, [], users)
        heads = compute_department_head_kpis(managers, users)
        rollups = compute_rollup_kpis(managers, directory)

        tsd_head = next(h for h in heads if h.head_id == "U10")
        tsd_rollup = next(r for r in rollups if r.user_id == "U10")
        assert tsd_rollup.avg_score == tsd_head.avg_manager_score
        assert tsd_rollup.total_escalated == tsd_head.total_escalated
        assert tsd_rollup.manager_count == tsd_head.manager_count
        assert tsd_rollup.depth == 1

    def test_users_without_managers_below_are_omitted(self, users, directory):
        managers = compute_manager_kpis([], [], users)
        rollups = compute_rollup_kpis(managers, directory)
        assert [r.user_id for r in rollups] == ["U10"]

    def test_deep_tree(self):
        directory = UserDirectory([
            make_user("CEO", "Chief", Designation.DEPARTMENT_HEAD),
            make_user("H", "Head", Designation.DEPARTMENT_HEAD, reports_to="CEO"),
            make_user("S", "Senior", Designation.MANAGER, reports_to="H"),
            make_user("J", "Junior", Designation.MANAGER, reports_to="S"),
        ])
        findings = [make_finding(auditee="Junior", is_escalated=True)]
        managers = compute_manager_kpis(findings, [], directory)
        rollups = {r.user_id: r for r in compute_rollup_kpis(managers, directory)}

        assert set(rollups) == {"CEO", "H", "S"}
        assert rollups["S"].manager_count == 1
        assert rollups["S"].avg_score == 75
        assert rollups["H"].manager_count == 2
        # (100 + 75) / 2 = 87.5 -> 88
        assert rollups["H"].avg_score == 88
        assert rollups["H"].depth == 2
        assert rollups["CEO"].depth == 3
        assert rollups["CEO"].total_escalated == 1

    def test_pure(self, users, directory):
        findings = (make_finding(),)
        first = compute_manager_kpis(findings, (), users)
        second = compute_manager_kpis(findings, (), users)
        assert first == second
