"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock so that services never call
    ``datetime.now()`` directly.  Submission timestamps, creation
    timestamps, and every turnaround-time calculation flow from a Clock
    instance.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    - SequentialClock raises ValueError when built from an empty list.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Iterator


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that stamp records (``created_at``, ``submitted_at``,
        ``response_at``) receive a Clock via constructor injection.

    Guarantees:
        ``now()`` returns a timezone-aware UTC ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...


class SystemClock(Clock):
    """Production clock returning actual system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance()`` or ``set_time()`` is called.
        - ``advance_days()`` moves the clock in whole days, which is the
          granularity every TAT calculation works in.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._offset = timedelta(0)

    def now(self) -> datetime:
        return self._fixed_time + self._offset

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = time
        self._offset = timedelta(0)

    def advance(self, seconds: int = 1) -> None:
        self._offset += timedelta(seconds=seconds)

    def advance_days(self, days: int = 1) -> datetime:
        """Advance by whole days and return the new time."""
        self._offset += timedelta(days=days)
        return self.now()


class SequentialClock(Clock):
    """
    Clock that returns times from a predefined list, then repeats the last.

    Useful for scenarios that need a distinct timestamp per command
    (create, submit, resubmit) without manual ``advance`` calls.
    """

    def __init__(self, times: list[datetime]):
        if not times:
            raise ValueError("SequentialClock requires at least one time")
        self._times: Iterator[datetime] = iter(times)
        self._last_time: datetime = times[0]

    def now(self) -> datetime:
        try:
            self._last_time = next(self._times)
        except StopIteration:
            pass
        return self._last_time
