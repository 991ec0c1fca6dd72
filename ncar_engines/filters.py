"""
ncar_engines.filters -- Read-side finding and audit-plan filters.

Status groupings used by the finding list and the lead auditor's
validation queue.  The finding-list groups overlap: a REOPENED finding is
both pending (the auditee owes a new plan) and rejected.  On the validation
queue "pending" means awaiting review, i.e. ACTION_PLAN_SUBMITTED only.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from enum import Enum

from ncar_kernel.domain.records import AuditPlan, Finding
from ncar_kernel.domain.values import AuditPlanStatus, FindingStatus, FindingType


class StatusFilter(str, Enum):
    ALL = "All"
    PENDING = "Pending"
    REJECTED = "Rejected"
    APPROVED = "Approved"
    CLOSED = "Closed"


STATUS_GROUPS: dict[StatusFilter, frozenset[FindingStatus]] = {
    StatusFilter.ALL: frozenset(FindingStatus),
    StatusFilter.PENDING: frozenset({
        FindingStatus.OPEN,
        FindingStatus.ACTION_PLAN_SUBMITTED,
        FindingStatus.REOPENED,
    }),
    StatusFilter.REJECTED: frozenset({
        FindingStatus.REJECTED,
        FindingStatus.REOPENED,
    }),
    StatusFilter.APPROVED: frozenset({
        FindingStatus.CLOSED,
        FindingStatus.VALIDATED,
    }),
    StatusFilter.CLOSED: frozenset({FindingStatus.CLOSED}),
}

VALIDATION_QUEUE_STATUSES: frozenset[FindingStatus] = frozenset({
    FindingStatus.ACTION_PLAN_SUBMITTED,
    FindingStatus.CLOSED,
    FindingStatus.REOPENED,
    FindingStatus.REJECTED,
})

VALIDATION_STATUS_GROUPS: dict[StatusFilter, frozenset[FindingStatus]] = {
    StatusFilter.ALL: VALIDATION_QUEUE_STATUSES,
    StatusFilter.PENDING: frozenset({FindingStatus.ACTION_PLAN_SUBMITTED}),
    StatusFilter.REJECTED: STATUS_GROUPS[StatusFilter.REJECTED],
    StatusFilter.APPROVED: STATUS_GROUPS[StatusFilter.APPROVED] & VALIDATION_QUEUE_STATUSES,
    StatusFilter.CLOSED: STATUS_GROUPS[StatusFilter.CLOSED],
}


def _matches_query(finding: Finding, needle: str) -> bool:
    return any(
        needle in value.lower()
        for value in (finding.id, finding.requirement, finding.area)
    )


def _select(
    findings: Iterable[Finding],
    allowed: frozenset[FindingStatus],
    finding_types: Iterable[FindingType] | None,
    query: str,
) -> list[Finding]:
    types = frozenset(finding_types or ())
    needle = query.strip().lower()
    return [
        f for f in findings
        if f.status in allowed
        and (not types or f.finding_type in types)
        and (not needle or _matches_query(f, needle))
    ]


def filter_findings(
    findings: Iterable[Finding],
    status: StatusFilter = StatusFilter.ALL,
    finding_types: Iterable[FindingType] | None = None,
    query: str = "",
) -> list[Finding]:
    """Filter findings by status group, severity and free-text query.

    Args:
        status: Status group; ``ALL`` keeps every status.
        finding_types: Severities to keep; None or empty keeps all.
        query: Case-insensitive substring matched against id,
            requirement and area.  Blank matches everything.
    """
    return _select(findings, STATUS_GROUPS[status], finding_types, query)


def validation_queue(
    findings: Iterable[Finding],
    status: StatusFilter = StatusFilter.ALL,
    finding_types: Iterable[FindingType] | None = None,
    query: str = "",
) -> list[Finding]:
    """Findings shown on the lead auditor's review screen.

    Same arguments as ``filter_findings``, but status groups come from
    ``VALIDATION_STATUS_GROUPS`` and never leave the queue.
    """
    return _select(findings, VALIDATION_STATUS_GROUPS[status], finding_types, query)


def _plan_matches_query(plan: AuditPlan, needle: str) -> bool:
    return needle in plan.id.lower() or any(
        needle in name.lower() for name in (*plan.auditors, *plan.auditees)
    )


def filter_audit_plans(
    plans: Iterable[AuditPlan],
    query: str = "",
    status: AuditPlanStatus | None = None,
    day: date | None = None,
) -> list[AuditPlan]:
    """Filter audit plans by free text, stage and an in-window day.

    ``query`` is a case-insensitive substring of the plan id or any
    auditor/auditee name; ``day`` keeps plans whose
    ``[start_date, end_date]`` contains it.  None/blank disables a filter.
    """
    needle = query.strip().lower()
    return [
        p for p in plans
        if (not needle or _plan_matches_query(p, needle))
        and (status is None or p.status == status)
        and (day is None or p.covers(day))
    ]
