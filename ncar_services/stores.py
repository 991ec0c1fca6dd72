"""
ncar_services.stores -- In-process record stores.

Responsibility:
    Own the working set of findings, action plans and audit plans.  Each
    store holds an immutable tuple; every mutation builds a new tuple and
    rebinds the reference, so a reader always sees a complete pre- or
    post-state.

Architecture position:
    Services layer.  Imports kernel domain types and exceptions only.
    Module services (``ncar_modules.*.service``) are the only writers.

Invariants enforced:
    - Whole-collection replacement: ``snapshot`` returns the same tuple
      object until the next mutation.
    - Record ids are unique within a store; ``next_id`` never returns an
      id already present.
    - Action-plan history is append-only; the current plan for a finding
      is the most recently added one.

Failure modes:
    - ``require`` raises the store's typed LookupFailure subclass for an
      unknown id.
    - ``add`` raises ValueError for a duplicate id; ``replace`` raises the
      typed LookupFailure for an unknown one.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Generic, TypeVar

from ncar_kernel.domain.records import ActionPlan, AuditPlan, Finding
from ncar_kernel.exceptions import (
    ActionPlanNotFoundError,
    AuditPlanNotFoundError,
    FindingNotFoundError,
    LookupFailure,
)
from ncar_kernel.logging_config import get_logger

logger = get_logger("services.stores")

R = TypeVar("R", Finding, ActionPlan, AuditPlan)


def format_record_id(prefix: str, seq: int, at: datetime) -> str:
    """``{prefix}_{seq:06d}_{YYYYMM}``, e.g. ``NCAR_000001_202401``."""
    return f"{prefix}_{seq:06d}_{at:%Y%m}"


class RecordStore(Generic[R]):
    """Tuple-backed store keyed by record ``id``.

    Subclasses set ``id_prefix`` and ``not_found``.
    """

    id_prefix: str = ""
    not_found: type[LookupFailure] = LookupFailure

    def __init__(self, records: Iterable[R] = ()) -> None:
        self._records: tuple[R, ...] = ()
        self.load(records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return any(r.id == record_id for r in self._records)

    @property
    def snapshot(self) -> tuple[R, ...]:
        return self._records

    def get(self, record_id: str) -> R | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def require(self, record_id: str) -> R:
        record = self.get(record_id)
        if record is None:
            raise self.not_found(record_id)
        return record

    def next_id(self, at: datetime) -> str:
        """First free id at or above ``len + 1``.

        Seeded history can leave gaps, so the count alone may collide.
        """
        taken = {r.id for r in self._records}
        seq = len(self._records) + 1
        record_id = format_record_id(self.id_prefix, seq, at)
        while record_id in taken:
            seq += 1
            record_id = format_record_id(self.id_prefix, seq, at)
        return record_id

    def load(self, records: Iterable[R]) -> None:
        """Replace the whole working set, e.g. with historical records."""
        items = tuple(records)
        seen: set[str] = set()
        for record in items:
            if record.id in seen:
                raise ValueError(f"Duplicate {self.id_prefix} id: {record.id}")
            seen.add(record.id)
        self._records = items
        logger.debug(
            "store_loaded",
            extra={"store": type(self).__name__, "record_count": len(items)},
        )

    def add(self, record: R) -> R:
        if record.id in self:
            raise ValueError(f"Duplicate {self.id_prefix} id: {record.id}")
        self._records = self._records + (record,)
        return record

    def replace(self, record: R) -> R:
        """Swap in a new version of an existing record."""
        if record.id not in self:
            raise self.not_found(record.id)
        self._records = tuple(
            record if r.id == record.id else r for r in self._records
        )
        return record


class FindingStore(RecordStore[Finding]):
    id_prefix = "NCAR"
    not_found = FindingNotFoundError


class AuditPlanStore(RecordStore[AuditPlan]):
    id_prefix = "AP"
    not_found = AuditPlanNotFoundError


class ActionPlanStore(RecordStore[ActionPlan]):
    """Append-only action-plan history.

    A finding may accumulate several plans across reject/resubmit cycles;
    ``current`` projects the latest one per finding.
    """

    id_prefix = "ACT"
    not_found = ActionPlanNotFoundError

    def history_for(self, ncar_id: str) -> tuple[ActionPlan, ...]:
        """All plans for a finding, oldest first."""
        return tuple(p for p in self._records if p.ncar_id == ncar_id)

    def current_for(self, ncar_id: str) -> ActionPlan | None:
        history = self.history_for(ncar_id)
        return history[-1] if history else None

    def current(self) -> tuple[ActionPlan, ...]:
        """The current plan of every finding, in order of first submission."""
        latest: dict[str, ActionPlan] = {}
        for plan in self._records:
            latest[plan.ncar_id] = plan
        return tuple(latest.values())
