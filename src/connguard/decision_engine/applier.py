from __future__ import annotations

import logging

from connguard.ports import ConnectionRepository, JobHistory, Notifier
from connguard.schemas import (
    AutoDisableOutput,
    ConnectionStatus,
    Decision,
    Disable,
    NoOp,
    NotificationKind,
    Warn,
)


class ActionApplier:
    def __init__(
        self,
        connections: ConnectionRepository,
        notifier: Notifier,
        history: JobHistory,
    ) -> None:
        self._connections = connections
        self._notifier = notifier
        self._history = history
        self._log = logging.getLogger(self.__class__.__name__)

    def apply(self, decision: Decision) -> AutoDisableOutput:
        if isinstance(decision, Disable):
            self._connections.set_status(decision.connection_id, ConnectionStatus.INACTIVE)
            self._log.info(
                "connection_auto_disabled",
                extra={
                    "extra_fields": {
                        "connection_id": decision.connection_id,
                        "reason": decision.reason.value,
                        "evaluated_at": decision.evaluated_at.isoformat(),
                    }
                },
            )
            error = self._notify(NotificationKind.CONNECTION_DISABLED, decision.connection_id)
            return AutoDisableOutput(disabled=True, decision=decision, notification_error=error)

        if isinstance(decision, Warn):
            self._log.info(
                "connection_auto_disable_warning",
                extra={
                    "extra_fields": {
                        "connection_id": decision.connection_id,
                        "reason": decision.reason.value,
                        "evaluated_at": decision.evaluated_at.isoformat(),
                    }
                },
            )
            error = self._notify(NotificationKind.CONNECTION_DISABLED_WARNING, decision.connection_id)
            return AutoDisableOutput(disabled=False, decision=decision, notification_error=error)

        if isinstance(decision, NoOp):
            return AutoDisableOutput(disabled=False, decision=decision)

        raise TypeError(f"Unsupported decision: {decision!r}")

    def _notify(self, kind: NotificationKind, connection_id: str) -> str:
        # Delivery is best-effort and never rolls back a status write.
        try:
            job = self._history.last_job(connection_id)
            self._notifier.send(kind, connection_id, job=job)
        except Exception as exc:
            self._log.exception(
                "auto_disable_notification_failed",
                extra={
                    "extra_fields": {
                        "connection_id": connection_id,
                        "kind": kind.value,
                    }
                },
            )
            return f"{type(exc).__name__}: {exc}"
        return ""
