"""
ncar_services -- Package init and public API.

Responsibility:
    Stateful services around the pure engines: the record stores, the
    workflow executor, the notification port and the analytics facade.
    This is the only layer that holds mutable state or reads a clock.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        ncar_services/ -> ncar_engines/  (allowed)
        ncar_services/ -> ncar_kernel/   (allowed)
        ncar_engines/  -> ncar_services/ (FORBIDDEN)
        ncar_kernel/   -> ncar_services/ (FORBIDDEN)
"""

from ncar_services.analytics_service import AnalyticsService
from ncar_services.notifications import (
    CollectingNotificationSink,
    LoggingNotificationSink,
    Notification,
    NotificationSink,
    notify_safely,
)
from ncar_services.orchestrator import TrackerOrchestrator, build_tracker_orchestrator
from ncar_services.stores import ActionPlanStore, AuditPlanStore, FindingStore
from ncar_services.workflow_executor import WorkflowExecutor

__all__ = [
    "ActionPlanStore",
    "AnalyticsService",
    "AuditPlanStore",
    "CollectingNotificationSink",
    "FindingStore",
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "TrackerOrchestrator",
    "WorkflowExecutor",
    "build_tracker_orchestrator",
    "notify_safely",
]
