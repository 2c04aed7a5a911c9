from __future__ import annotations

from connguard.config import FeatureFlagConfig


class EnvFeatureFlags:
    def __init__(self, cfg: FeatureFlagConfig) -> None:
        self._cfg = cfg

    def auto_disables_failing_connections(self) -> bool:
        return self._cfg.auto_disables_failing_connections
