"""
ncar_services.orchestrator -- Central wiring for the tracker's services.

Responsibility:
    Creates the stores, the workflow executor and the analytics facade
    exactly once and shares them.  Module services (findings, audit plans)
    are not created here -- ncar_services must not import ncar_modules.
    Construct them with the orchestrator's parts::

        orchestrator = build_tracker_orchestrator(config, clock=clock)
        findings = FindingService(
            orchestrator.findings,
            orchestrator.action_plans,
            orchestrator.workflow_executor,
            clock=orchestrator.clock,
            notifier=orchestrator.notifier,
        )

Invariants enforced:
    - Single-instance lifecycle: one store per record kind per tracker.
    - Strictness comes from ``NcarConfig.strict_transitions`` unless
      overridden.
"""

from __future__ import annotations

from ncar_config.schema import NcarConfig
from ncar_kernel.domain.clock import Clock, SystemClock
from ncar_kernel.domain.directory import UserDirectory
from ncar_kernel.logging_config import get_logger
from ncar_services.analytics_service import AnalyticsService
from ncar_services.notifications import LoggingNotificationSink, NotificationSink
from ncar_services.stores import ActionPlanStore, AuditPlanStore, FindingStore
from ncar_services.workflow_executor import WorkflowExecutor

logger = get_logger("services.orchestrator")


class TrackerOrchestrator:
    """Holds the shared working set and infrastructure of one tracker."""

    def __init__(
        self,
        config: NcarConfig,
        clock: Clock | None = None,
        notifier: NotificationSink | None = None,
        directory: UserDirectory | None = None,
        strict: bool | None = None,
    ):
        self.config = config
        self.clock = clock or SystemClock()
        self.notifier = notifier or LoggingNotificationSink()
        self.findings = FindingStore()
        self.action_plans = ActionPlanStore()
        self.audit_plans = AuditPlanStore()
        self.workflow_executor = WorkflowExecutor(
            strict=config.strict_transitions if strict is None else strict,
        )
        self.analytics = AnalyticsService(
            self.findings,
            self.action_plans,
            directory=directory,
            config=config,
            clock=self.clock,
        )
        logger.info(
            "tracker_orchestrator_created",
            extra={
                "config_set_id": config.config_id,
                "strict_transitions": self.workflow_executor.strict,
            },
        )


def build_tracker_orchestrator(
    config: NcarConfig | None = None,
    clock: Clock | None = None,
    notifier: NotificationSink | None = None,
    directory: UserDirectory | None = None,
) -> TrackerOrchestrator:
    """Build an orchestrator, loading the active config when none is given."""
    if config is None:
        from ncar_config import get_active_config

        config = get_active_config()
    return TrackerOrchestrator(
        config, clock=clock, notifier=notifier, directory=directory,
    )
