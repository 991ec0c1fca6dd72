"""
Domain value enums (``ncar_kernel.domain.values``).

Responsibility
--------------
Closed vocabularies shared by every layer: actor roles, organizational
designations, finding and audit-plan statuses, finding severities, audit
types, and notification severities.

Architecture position
---------------------
**Kernel domain layer** -- pure values.  ZERO I/O.  No imports from
services, modules, or config.

Invariants enforced
-------------------
* Enum values are the display strings used by historical finding data, so
  records round-trip through collaborators unchanged.
* ``AuditPlanStatus`` carries a total order (``rank``) used by the
  audit-plan lifecycle to guarantee monotonic advancement.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor roles.  Gate every lifecycle command."""

    LEAD_AUDITOR = "LEAD_AUDITOR"
    AUDITOR = "AUDITOR"
    AUDITEE = "AUDITEE"
    DEV_ADMIN = "DEV_ADMIN"


class Designation(str, Enum):
    """Organizational designation.  Drives KPI tier membership."""

    STAFF = "Staff"
    SUPERVISOR = "Supervisor"
    ASSISTANT_MANAGER = "Assistant Manager"
    MANAGER = "Manager"
    DEPARTMENT_HEAD = "Department Head"


class FindingStatus(str, Enum):
    """NCAR lifecycle states.  Must align with ``FINDING_WORKFLOW.states``.

    ``REJECTED`` is a legacy synonym of ``REOPENED``; ``VALIDATED`` is a
    legacy synonym of ``CLOSED``.  Both are accepted from historical data
    but never written by new transitions.
    """

    OPEN = "Open"
    ACTION_PLAN_SUBMITTED = "Action Plan Submitted"
    REJECTED = "Rejected"
    VALIDATED = "Validated"
    CLOSED = "Closed"
    REOPENED = "Reopened"


REJECTED_STATUSES: frozenset[FindingStatus] = frozenset({
    FindingStatus.REOPENED,
    FindingStatus.REJECTED,
})

CLOSED_STATUSES: frozenset[FindingStatus] = frozenset({
    FindingStatus.CLOSED,
    FindingStatus.VALIDATED,
})


class AuditPlanStatus(str, Enum):
    """Audit-plan stages, ordered ``DRAFT < PLANNED < ACTUAL < CLOSED``."""

    DRAFT = "Draft"
    PLANNED = "Planned"
    ACTUAL = "Actual Audit"
    CLOSED = "Closed"

    @property
    def rank(self) -> int:
        return _AUDIT_PLAN_ORDER.index(self)

    @property
    def next(self) -> AuditPlanStatus | None:
        """The following stage, or None when already closed."""
        idx = self.rank + 1
        if idx >= len(_AUDIT_PLAN_ORDER):
            return None
        return _AUDIT_PLAN_ORDER[idx]


_AUDIT_PLAN_ORDER: tuple[AuditPlanStatus, ...] = (
    AuditPlanStatus.DRAFT,
    AuditPlanStatus.PLANNED,
    AuditPlanStatus.ACTUAL,
    AuditPlanStatus.CLOSED,
)


class FindingType(str, Enum):
    """Finding severity.  OFI is a non-blocking improvement opportunity."""

    MAJOR = "Major"
    MINOR = "Minor"
    OFI = "OFI"


class AuditType(str, Enum):
    QUALITY_INFOSEC = "Quality/InfoSec"
    FINANCIAL = "Financial"
    SPECIAL_REQUEST = "Special Request"


class NotificationSeverity(str, Enum):
    """Severity passed to the notification sink."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
