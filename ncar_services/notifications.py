"""
ncar_services.notifications -- Notification sink port.

Responsibility:
    Defines the collaborator interface the lifecycle services call after a
    command (toasts in the original screens), plus two in-process sinks:
    one that logs and one that collects for tests.

Architecture position:
    Services layer.  Module services receive a sink by constructor
    injection and call it through ``notify_safely``.

Invariants enforced:
    - A failing sink never fails the command that triggered it; the error
      is logged and swallowed at this boundary only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ncar_kernel.domain.values import NotificationSeverity
from ncar_kernel.logging_config import get_logger

logger = get_logger("services.notifications")


@runtime_checkable
class NotificationSink(Protocol):
    def notify(self, message: str, severity: NotificationSeverity) -> None:
        ...


@dataclass(frozen=True)
class Notification:
    message: str
    severity: NotificationSeverity


class CollectingNotificationSink:
    """Keeps every notification in memory, oldest first."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, message: str, severity: NotificationSeverity) -> None:
        self.notifications.append(Notification(message, severity))

    def messages(self, severity: NotificationSeverity | None = None) -> list[str]:
        return [
            n.message for n in self.notifications
            if severity is None or n.severity == severity
        ]

    def clear(self) -> None:
        self.notifications.clear()


class LoggingNotificationSink:
    """Default sink: writes each notification as a structured log record."""

    def notify(self, message: str, severity: NotificationSeverity) -> None:
        level = "warning" if severity == NotificationSeverity.WARNING else "info"
        getattr(logger, level)(
            "notification",
            extra={"notification": message, "severity": severity},
        )


def notify_safely(
    sink: NotificationSink | None,
    message: str,
    severity: NotificationSeverity,
) -> None:
    """Deliver a notification; sink failures are logged, never raised."""
    if sink is None:
        return
    try:
        sink.notify(message, severity)
    except Exception as e:  # noqa: BLE001
        logger.warning(
            "notification_sink_failed",
            extra={"severity": severity, "error": str(e)},
        )
