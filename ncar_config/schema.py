"""
Configuration Schema (``ncar_config.schema``).

Frozen dataclasses for the tracker's runtime settings.  Values are
validated on construction so a bad YAML file fails at load, not at the
first KPI refresh.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_AREAS: tuple[str, ...] = (
    "DISD", "TSD", "TASS", "IA", "MSP", "CSS", "DCFI", "BTSG", "EEM",
)


@dataclass(frozen=True)
class ScoringConfig:
    """Manager score weights."""
    base_score: int = 100
    escalation_penalty: int = 20
    open_penalty: int = 5

    def __post_init__(self) -> None:
        for name in ("base_score", "escalation_penalty", "open_penalty"):
            if getattr(self, name) < 0:
                raise ValueError(f"scoring.{name} cannot be negative")


@dataclass(frozen=True)
class NcarConfig:
    """
    Complete tracker configuration.

    Invariants:
        - ``overdue_threshold_days`` and ``default_deadline_days`` are
          non-negative.
        - ``areas`` is non-empty and has no duplicates.
    """
    config_id: str = "default"
    version: int = 1
    overdue_threshold_days: int = 5
    strict_transitions: bool = False
    default_deadline_days: int = 7
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    areas: tuple[str, ...] = DEFAULT_AREAS
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.overdue_threshold_days < 0:
            raise ValueError("overdue_threshold_days cannot be negative")
        if self.default_deadline_days < 0:
            raise ValueError("default_deadline_days cannot be negative")
        if not self.areas:
            raise ValueError("areas cannot be empty")
        if len(set(self.areas)) != len(self.areas):
            raise ValueError("areas contains duplicates")
