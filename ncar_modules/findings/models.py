"""
Finding Command Models (``ncar_modules.findings.models``).

Responsibility
--------------
Frozen input objects for the finding commands -- the finding form and the
action-plan form -- plus the required-field checks applied before any
transition is attempted.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  The persisted records
(``Finding``, ``ActionPlan``) live in ``ncar_kernel.domain.records``;
these are only what a collaborator submits.

Failure modes
-------------
* ``ValidationError`` from ``validate()`` listing every empty required
  field.  A field that is only whitespace counts as empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

from ncar_kernel.domain.values import AuditType, FindingType
from ncar_kernel.exceptions import ValidationError

DEFAULT_STANDARD_CLAUSE = "8.1"


def _blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_fields(obj: object, names: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(name for name in names if _blank(getattr(obj, name)))


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC, matching the clock."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def derive_standard_clause(requirement: str) -> str:
    """Last whitespace-separated token of the requirement text.

    >>> derive_standard_clause("ISO 9001:2015 7.5.3")
    '7.5.3'
    """
    tokens = requirement.split()
    return tokens[-1] if tokens else DEFAULT_STANDARD_CLAUSE


@dataclass(frozen=True)
class FindingFields:
    """The finding form, used by both create and edit."""
    statement: str
    requirement: str
    evidence: str
    area: str
    auditee: str
    deadline: datetime | None
    finding_type: FindingType = FindingType.MINOR
    auditor: str = ""
    audit_plan_id: str | None = None
    standard_clause: str | None = None
    clause_number: str | None = None
    attachment_name: str | None = None
    audit_type: AuditType = AuditType.QUALITY_INFOSEC
    process_name: str = ""

    REQUIRED = (
        "statement", "evidence", "area", "requirement", "auditee", "deadline",
    )

    def validate(self) -> None:
        missing = missing_fields(self, self.REQUIRED)
        if missing:
            raise ValidationError("finding", missing_fields=missing)

    @property
    def resolved_deadline(self) -> datetime:
        return as_utc(self.deadline)

    @property
    def resolved_standard_clause(self) -> str:
        if self.standard_clause and self.standard_clause.strip():
            return self.standard_clause
        return derive_standard_clause(self.requirement)


@dataclass(frozen=True)
class ActionPlanFields:
    """The corrective-action plan form submitted by the auditee."""
    immediate_correction: str
    root_cause: str
    corrective_action: str
    responsible_person: str
    due_date: date | None
    remarks: str | None = None

    REQUIRED = (
        "immediate_correction",
        "root_cause",
        "corrective_action",
        "responsible_person",
        "due_date",
    )

    def validate(self) -> None:
        missing = missing_fields(self, self.REQUIRED)
        if missing:
            raise ValidationError("action plan", missing_fields=missing)
