"""
Module: ncar_engines.summary
Responsibility:
    Dashboard projections over the finding population: headline counts,
    per-area and per-process breakdowns, response TAT per audit type, and
    the severity distribution.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ncar_kernel/domain types and sibling engines.

Invariants enforced:
    - "open" means OPEN or REOPENED; "closed" means the literal CLOSED
      status.  Legacy VALIDATED findings are neither.
    - An OFI never counts as an NCAR.
    - ``tat_by_audit_type`` always covers every audit type, reporting 0
      when no finding of that type has been responded to.

Usage:
    from ncar_engines.summary import summarize_findings

    summary = summarize_findings(findings, threshold_days=5, now=clock.now())
    summary.overdue
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ncar_engines.kpi import filter_by_audit_type
from ncar_engines.tat import average_days, is_overdue, response_days
from ncar_engines.tracer import traced_engine
from ncar_kernel.domain.records import Finding
from ncar_kernel.domain.values import AuditType, FindingStatus, FindingType

DEFAULT_AREAS: tuple[str, ...] = (
    "DISD", "TSD", "TASS", "IA", "MSP", "CSS", "DCFI", "BTSG", "EEM",
)

UNKNOWN_PROCESS = "Unknown"

_OPEN_STATUSES = frozenset({FindingStatus.OPEN, FindingStatus.REOPENED})


@dataclass(frozen=True)
class FindingSummary:
    total: int
    open: int
    closed: int
    ofis: int
    ncars: int
    overdue: int


@dataclass(frozen=True)
class AreaCounts:
    area: str
    ncars: int
    ofis: int
    closed: int


@dataclass(frozen=True)
class ProcessCounts:
    process_name: str
    major: int
    minor: int
    ofi: int

    @property
    def total(self) -> int:
        return self.major + self.minor + self.ofi


@traced_engine("summary.findings", "1.0", fingerprint_fields=("threshold_days", "audit_type"))
def summarize_findings(
    findings: Iterable[Finding],
    threshold_days: int,
    now: datetime,
    audit_type: AuditType | None = None,
) -> FindingSummary:
    """Headline counts for the analytics dashboard."""
    scoped = filter_by_audit_type(findings, audit_type)
    ofis = sum(1 for f in scoped if f.finding_type == FindingType.OFI)
    return FindingSummary(
        total=len(scoped),
        open=sum(1 for f in scoped if f.status in _OPEN_STATUSES),
        closed=sum(1 for f in scoped if f.status == FindingStatus.CLOSED),
        ofis=ofis,
        ncars=len(scoped) - ofis,
        overdue=sum(1 for f in scoped if is_overdue(f, threshold_days, now)),
    )


def area_breakdown(
    findings: Iterable[Finding],
    areas: Sequence[str] = DEFAULT_AREAS,
) -> list[AreaCounts]:
    """Per-area counts, one row per configured area in the given order.

    Findings whose area is not listed are ignored.
    """
    rows: dict[str, list[int]] = {area: [0, 0, 0] for area in areas}
    for f in findings:
        row = rows.get(f.area)
        if row is None:
            continue
        if f.finding_type == FindingType.OFI:
            row[1] += 1
        else:
            row[0] += 1
        if f.status == FindingStatus.CLOSED:
            row[2] += 1
    return [
        AreaCounts(area=area, ncars=r[0], ofis=r[1], closed=r[2])
        for area, r in rows.items()
    ]


def process_noncompliance(
    findings: Iterable[Finding],
    limit: int = 5,
) -> list[ProcessCounts]:
    """Processes with the most findings, by severity, largest first.

    Ties keep first-seen order.
    """
    if limit < 0:
        raise ValueError("limit cannot be negative")

    counts: dict[str, dict[FindingType, int]] = {}
    for f in findings:
        name = f.process_name.strip() or UNKNOWN_PROCESS
        bucket = counts.setdefault(name, {t: 0 for t in FindingType})
        bucket[f.finding_type] += 1

    rows = [
        ProcessCounts(
            process_name=name,
            major=c[FindingType.MAJOR],
            minor=c[FindingType.MINOR],
            ofi=c[FindingType.OFI],
        )
        for name, c in counts.items()
    ]
    rows.sort(key=lambda r: r.total, reverse=True)
    return rows[:limit]


def tat_by_audit_type(findings: Iterable[Finding]) -> dict[AuditType, Decimal]:
    """Mean response days per audit type, one decimal, 0 when none."""
    items = list(findings)
    result: dict[AuditType, Decimal] = {}
    for audit_type in AuditType:
        avg = average_days(
            response_days(f.created_at, f.response_at)
            for f in items
            if f.audit_type == audit_type and f.response_at is not None
        )
        result[audit_type] = avg if avg is not None else Decimal(0)
    return result


def severity_distribution(findings: Iterable[Finding]) -> dict[FindingType, int]:
    result = {t: 0 for t in FindingType}
    for f in findings:
        result[f.finding_type] += 1
    return result
