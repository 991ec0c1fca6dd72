"""
Lifecycle records (``ncar_kernel.domain.records``).

Responsibility
--------------
Frozen value objects for the three owned record kinds: findings (NCARs),
corrective-action plans, and audit plans.  These flow *into* the pure
engines (TAT, KPI, summaries) and *out of* the module services as
immutable snapshots.

Architecture position
---------------------
**Kernel domain layer** -- pure data definitions.  No I/O, no store
access.  Lives in the kernel so that ``ncar_engines`` can consume the
records without importing ``ncar_modules``.

Invariants enforced
-------------------
* All records are ``frozen=True``; services produce new versions with
  ``dataclasses.replace``.
* All timestamps are timezone-aware ``datetime`` values supplied by a
  ``Clock``; ``ActionPlan.due_date`` is a calendar ``date``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

from ncar_kernel.domain.values import (
    AuditPlanStatus,
    AuditType,
    FindingStatus,
    FindingType,
    REJECTED_STATUSES,
)


@dataclass(frozen=True)
class Finding:
    """A non-conformance finding (NCAR).

    Contract: frozen.
    Guarantees (maintained by ``FindingService``):
        - ``rejection_remarks`` is set only while status is REOPENED/REJECTED.
        - ``response_at`` is the first action-plan submission time.
    Non-goals: does not validate descriptive fields -- the service does.
    """
    id: str
    statement: str
    requirement: str
    evidence: str
    finding_type: FindingType
    area: str
    auditor: str
    auditee: str
    created_at: datetime
    deadline: datetime
    status: FindingStatus = FindingStatus.OPEN
    audit_plan_id: str = "AP_UNKNOWN"
    standard_clause: str = ""
    clause_number: str | None = None
    attachment_name: str | None = None
    rejection_remarks: str | None = None
    audit_type: AuditType = AuditType.QUALITY_INFOSEC
    process_name: str = ""
    is_escalated: bool = False
    response_at: datetime | None = None

    @property
    def is_reopened(self) -> bool:
        return self.status in REJECTED_STATUSES


@dataclass(frozen=True)
class ActionPlan:
    """A corrective action plan (CAP) submitted against a finding."""
    id: str
    ncar_id: str
    immediate_correction: str
    root_cause: str
    corrective_action: str
    responsible_person: str
    due_date: date
    submitted_at: datetime
    completed_at: datetime | None = None
    remarks: str | None = None

    @property
    def is_timely(self) -> bool:
        """Completed on or before its due date (calendar day, UTC)."""
        if self.completed_at is None:
            return False
        completed = self.completed_at
        if completed.tzinfo is not None:
            completed = completed.astimezone(timezone.utc)
        return completed.date() <= self.due_date


@dataclass(frozen=True)
class AuditPlan:
    """Scheduling envelope for an audit.

    ``is_locked`` is carried as data only; no lifecycle rule consults it.
    """
    id: str
    start_date: date
    end_date: date
    auditors: tuple[str, ...]
    auditees: tuple[str, ...]
    created_at: datetime
    audit_type: AuditType = AuditType.QUALITY_INFOSEC
    process_name: str = ""
    status: AuditPlanStatus = AuditPlanStatus.DRAFT
    is_locked: bool = False
    attachment_name: str | None = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
