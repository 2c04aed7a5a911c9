from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


WARNING_MODES = {"exact_midpoint", "half_to_full"}


@dataclass(frozen=True)
class PolicyConfig:
    max_failed_jobs_in_a_row: int = 100
    max_days_of_only_failed_jobs: int = 14
    warning_mode: str = "exact_midpoint"

    @property
    def warn_failed_jobs_in_a_row(self) -> int:
        return self.max_failed_jobs_in_a_row // 2

    @property
    def warn_days_of_only_failed_jobs(self) -> int:
        return self.max_days_of_only_failed_jobs // 2


@dataclass(frozen=True)
class FeatureFlagConfig:
    auto_disables_failing_connections: bool = False


@dataclass(frozen=True)
class StoreConfig:
    db_path: str = "data/connguard.db"


@dataclass(frozen=True)
class NotificationConfig:
    out_dir: str = "runs/notifications"
    jsonl_name: str = "notifications.jsonl"


@dataclass(frozen=True)
class AppConfig:
    policy: PolicyConfig
    features: FeatureFlagConfig
    store: StoreConfig
    notifications: NotificationConfig


def _get_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def load_config() -> AppConfig:
    load_dotenv()
    cfg = AppConfig(
        policy=PolicyConfig(
            max_failed_jobs_in_a_row=int(
                os.getenv(
                    "MAX_FAILED_JOBS_IN_A_ROW_BEFORE_CONNECTION_DISABLE",
                    PolicyConfig.max_failed_jobs_in_a_row,
                )
            ),
            max_days_of_only_failed_jobs=int(
                os.getenv(
                    "MAX_DAYS_OF_ONLY_FAILED_JOBS_BEFORE_CONNECTION_DISABLE",
                    PolicyConfig.max_days_of_only_failed_jobs,
                )
            ),
            warning_mode=os.getenv("AUTO_DISABLE_WARNING_MODE", PolicyConfig.warning_mode),
        ),
        features=FeatureFlagConfig(
            auto_disables_failing_connections=_get_bool(
                "AUTO_DISABLE_FAILING_CONNECTIONS",
                FeatureFlagConfig.auto_disables_failing_connections,
            ),
        ),
        store=StoreConfig(
            db_path=os.getenv("CONNGUARD_DB_PATH", StoreConfig.db_path),
        ),
        notifications=NotificationConfig(
            out_dir=os.getenv("CONNGUARD_NOTIFICATION_DIR", NotificationConfig.out_dir),
        ),
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: AppConfig) -> None:
    if cfg.policy.max_failed_jobs_in_a_row < 1:
        raise ValueError("MAX_FAILED_JOBS_IN_A_ROW_BEFORE_CONNECTION_DISABLE must be >= 1")
    if cfg.policy.max_days_of_only_failed_jobs < 1:
        raise ValueError("MAX_DAYS_OF_ONLY_FAILED_JOBS_BEFORE_CONNECTION_DISABLE must be >= 1")
    if cfg.policy.warning_mode not in WARNING_MODES:
        raise ValueError("AUTO_DISABLE_WARNING_MODE must be exact_midpoint|half_to_full")
    if not cfg.store.db_path:
        raise ValueError("CONNGUARD_DB_PATH must be non-empty")
