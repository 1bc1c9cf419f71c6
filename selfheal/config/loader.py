from __future__ import annotations

import json
import os
from pathlib import Path

from selfheal.config.schema import SuiteConfig

ENABLED_ENV = "SELF_HEALING_ENABLED"
THRESHOLD_ENV = "SELF_HEALING_THRESHOLD"


class ConfigLoader:
    """Loads and validates the JSON self-healing configuration."""

    @staticmethod
    def load(path: str | Path) -> SuiteConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return SuiteConfig.model_validate(payload)

    @staticmethod
    def from_env(config: SuiteConfig | None = None) -> SuiteConfig:
        base = config or SuiteConfig()
        healing = base.healing.model_dump()
        enabled = os.getenv(ENABLED_ENV)
        if enabled is not None:
            healing["enabled"] = enabled.strip().lower() not in {"0", "false", "no", "off"}
        threshold = os.getenv(THRESHOLD_ENV)
        if threshold is not None:
            healing["confidence_threshold"] = float(threshold)
        payload = base.model_dump()
        payload["healing"] = healing
        return SuiteConfig.model_validate(payload)
