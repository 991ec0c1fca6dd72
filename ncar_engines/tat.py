"""
Module: ncar_engines.tat
Responsibility:
    Turnaround-time (TAT) arithmetic at day granularity: days remaining to
    a deadline, days elapsed from creation to first response, days a
    finding has been open, and the overdue predicate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ncar_kernel/domain types.

Invariants enforced:
    - Purity: no clock access.  ``now`` and the overdue threshold are
      always explicit parameters.
    - Day counts are ceilings of exact ``timedelta`` division, so no float
      rounding creeps in at day boundaries.
    - ``response_days`` is NOT clamped: a response stamped before creation
      yields zero or a negative count.

Usage:
    from ncar_engines.tat import days_remaining, is_overdue

    days_remaining(finding.deadline, now)           # >= 0
    is_overdue(finding, threshold_days=5, now=now)  # bool
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ncar_kernel.domain.records import Finding
from ncar_kernel.domain.values import FindingStatus

_ONE_DAY = timedelta(days=1)


def days_between(start: datetime, end: datetime) -> int:
    """``ceil((end - start) / 1 day)``; negative when ``end`` precedes ``start``."""
    whole, remainder = divmod(end - start, _ONE_DAY)
    return whole + 1 if remainder else whole


def days_remaining(deadline: datetime, now: datetime) -> int:
    """Whole days left until ``deadline``, floored at zero."""
    return max(0, days_between(now, deadline))


def response_days(created_at: datetime, response_at: datetime) -> int:
    """Days from creation to first action-plan submission (unclamped)."""
    return days_between(created_at, response_at)


def days_open(created_at: datetime, now: datetime) -> int:
    return days_between(created_at, now)


def is_overdue(finding: Finding, threshold_days: int, now: datetime) -> bool:
    """Not CLOSED and open for strictly more than ``threshold_days``.

    Only the literal CLOSED status stops the clock; legacy VALIDATED
    findings still count.
    """
    if finding.status == FindingStatus.CLOSED:
        return False
    return days_open(finding.created_at, now) > threshold_days


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """Round away from zero at .5, matching the dashboard's display rounding."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def average_days(values: Iterable[int], places: int = 1) -> Decimal | None:
    """Mean of day counts rounded half-up, or None when there are none."""
    items = list(values)
    if not items:
        return None
    return round_half_up(Decimal(sum(items)) / Decimal(len(items)), places)
