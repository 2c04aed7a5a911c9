from __future__ import annotations

import logging

from connguard.config import AppConfig
from connguard.decision_engine.applier import ActionApplier
from connguard.decision_engine.policy import WARNING_PREDICATES, AutoDisablePolicy
from connguard.feature_flags import EnvFeatureFlags
from connguard.ports import FeatureFlags
from connguard.schemas import AutoDisableInput, AutoDisableOutput, NoOp
from connguard.state_store.connections import SqliteConnectionStore
from connguard.state_store.jobs import SqliteJobHistoryStore
from connguard.telemetry.notifications import NotificationOutbox


class AutoDisableConnectionActivity:
    def __init__(
        self,
        feature_flags: FeatureFlags,
        policy: AutoDisablePolicy,
        applier: ActionApplier,
    ) -> None:
        self._feature_flags = feature_flags
        self._policy = policy
        self._applier = applier
        self._log = logging.getLogger(self.__class__.__name__)

    def auto_disable_failing_connection(self, activity_input: AutoDisableInput) -> AutoDisableOutput:
        if not self._feature_flags.auto_disables_failing_connections():
            self._log.info(
                "auto_disable_feature_off",
                extra={"extra_fields": {"connection_id": activity_input.connection_id}},
            )
            return AutoDisableOutput(
                disabled=False,
                decision=NoOp(activity_input.connection_id, activity_input.now),
            )

        decision = self._policy.decide(activity_input.connection_id, activity_input.now)
        return self._applier.apply(decision)


def build_activity(cfg: AppConfig) -> AutoDisableConnectionActivity:
    history = SqliteJobHistoryStore(cfg.store.db_path)
    connections = SqliteConnectionStore(cfg.store.db_path)
    policy = AutoDisablePolicy(
        history,
        cfg.policy,
        warning_predicate=WARNING_PREDICATES[cfg.policy.warning_mode],
    )
    applier = ActionApplier(connections, NotificationOutbox(cfg.notifications), history)
    return AutoDisableConnectionActivity(EnvFeatureFlags(cfg.features), policy, applier)
