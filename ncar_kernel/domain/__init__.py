"""
Pure domain layer.

This module contains pure value objects and domain logic with NO
dependencies on:
- Stores or services
- Configuration files
- Time (except through an injected Clock)
- I/O

All domain objects are immutable and deterministic.
"""

from ncar_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ncar_kernel.domain.directory import User, UserDirectory
from ncar_kernel.domain.records import ActionPlan, AuditPlan, Finding
from ncar_kernel.domain.values import (
    AuditPlanStatus,
    AuditType,
    Designation,
    FindingStatus,
    FindingType,
    NotificationSeverity,
    Role,
)
from ncar_kernel.domain.workflow import Transition, TransitionResult, Workflow

__all__ = [
    "ActionPlan",
    "AuditPlan",
    "AuditPlanStatus",
    "AuditType",
    "Clock",
    "Designation",
    "DeterministicClock",
    "Finding",
    "FindingStatus",
    "FindingType",
    "NotificationSeverity",
    "Role",
    "SystemClock",
    "Transition",
    "TransitionResult",
    "User",
    "UserDirectory",
    "Workflow",
]
