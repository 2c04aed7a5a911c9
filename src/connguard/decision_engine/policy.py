from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from connguard.config import PolicyConfig
from connguard.decision_engine.streak import consecutive_failures
from connguard.decision_engine.window_age import WindowAgeAnalyzer
from connguard.ports import JobHistory
from connguard.schemas import Decision, DecisionReason, Disable, NoOp, Warn, as_utc

WarningPredicate = Callable[[int, int], bool]


def exact_midpoint(streak: int, max_failed_jobs_in_a_row: int) -> bool:
    # One-shot alert: later failures between half and full stay quiet.
    return streak == max_failed_jobs_in_a_row // 2


def half_to_full(streak: int, max_failed_jobs_in_a_row: int) -> bool:
    return max_failed_jobs_in_a_row // 2 <= streak < max_failed_jobs_in_a_row


WARNING_PREDICATES: dict[str, WarningPredicate] = {
    "exact_midpoint": exact_midpoint,
    "half_to_full": half_to_full,
}


class AutoDisablePolicy:
    def __init__(
        self,
        history: JobHistory,
        thresholds: PolicyConfig,
        warning_predicate: WarningPredicate = exact_midpoint,
    ) -> None:
        self._thresholds = thresholds
        self._warning_predicate = warning_predicate
        self._analyzer = WindowAgeAnalyzer(history)
        self._log = logging.getLogger(self.__class__.__name__)

    def decide(self, connection_id: str, now: datetime) -> Decision:
        now = as_utc(now)
        max_days = self._thresholds.max_days_of_only_failed_jobs
        max_in_a_row = self._thresholds.max_failed_jobs_in_a_row

        window = self._analyzer.fetch_window(connection_id, now, max_days)
        if not window:
            return self._decided(NoOp(connection_id, now), streak=0, window_size=0)

        streak = consecutive_failures(window)
        if streak == 0:
            # Neither window signal can fire without a trailing failure.
            return self._decided(NoOp(connection_id, now), streak=0, window_size=len(window))

        decision: Decision
        if streak >= max_in_a_row:
            decision = Disable(connection_id, now, DecisionReason.FAILURE_STREAK)
        elif self._analyzer.only_failures_and_old_enough(connection_id, now, max_days, window=window):
            decision = Disable(connection_id, now, DecisionReason.ONLY_FAILED_JOBS)
        elif self._warning_predicate(streak, max_in_a_row):
            decision = Warn(connection_id, now, DecisionReason.FAILURE_STREAK)
        elif self._analyzer.only_failures_and_old_enough(
            connection_id,
            now,
            self._thresholds.warn_days_of_only_failed_jobs,
        ):
            decision = Warn(connection_id, now, DecisionReason.ONLY_FAILED_JOBS)
        else:
            decision = NoOp(connection_id, now)
        return self._decided(decision, streak=streak, window_size=len(window))

    def _decided(self, decision: Decision, *, streak: int, window_size: int) -> Decision:
        self._log.info(
            "auto_disable_decision",
            extra={
                "extra_fields": {
                    "connection_id": decision.connection_id,
                    "decision": type(decision).__name__,
                    "reason": decision.reason.value if not isinstance(decision, NoOp) else "",
                    "streak": streak,
                    "window_size": window_size,
                }
            },
        )
        return decision
