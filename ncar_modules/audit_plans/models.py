"""
Audit Plan Command Models (``ncar_modules.audit_plans.models``).

The audit-plan form.  Dates are optional (they default to the creation
day); at least one auditor and one auditee are required.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ncar_kernel.domain.values import AuditType
from ncar_kernel.exceptions import ValidationError

NO_ATTACHMENT = "No attachment"


def _names(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(v.strip() for v in values if v and v.strip())


@dataclass(frozen=True)
class AuditPlanFields:
    auditors: tuple[str, ...]
    auditees: tuple[str, ...]
    start_date: date | None = None
    end_date: date | None = None
    audit_type: AuditType = AuditType.QUALITY_INFOSEC
    process_name: str = ""
    attachment_name: str | None = None

    def validate(self) -> None:
        missing = []
        if not _names(self.auditors):
            missing.append("auditors")
        if not _names(self.auditees):
            missing.append("auditees")
        if missing:
            raise ValidationError("audit plan", missing_fields=tuple(missing))
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise ValidationError(
                "audit plan", reason="end_date is before start_date",
            )

    @property
    def auditor_names(self) -> tuple[str, ...]:
        return _names(self.auditors)

    @property
    def auditee_names(self) -> tuple[str, ...]:
        return _names(self.auditees)
