from __future__ import annotations

from pathlib import Path

import pytest

from selfheal.config.loader import ConfigLoader
from selfheal.config.schema import HealingConfig
from selfheal.core.healer import SelfHealingEngine
from selfheal.core.metadata import HealContext
from selfheal.core.store import FingerprintStore
from tests.helpers import FIXED_NOW

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "selfheal.json"


@pytest.fixture()
def store():
    return FingerprintStore()


@pytest.fixture()
def engine(store):
    return SelfHealingEngine(HealingConfig(), store=store, clock=lambda: FIXED_NOW)


@pytest.fixture()
def heal_context(request):
    return HealContext(test_file=request.node.path.name, test_name=request.node.name)


@pytest.fixture()
def suite_config(tmp_path, monkeypatch):
    monkeypatch.delenv("SELF_HEALING_ENABLED", raising=False)
    monkeypatch.delenv("SELF_HEALING_THRESHOLD", raising=False)
    config = ConfigLoader.from_env(ConfigLoader.load(CONFIG_PATH))
    healing = config.healing.model_copy(update={"artifacts_dir": str(tmp_path / "artifacts")})
    return config.model_copy(update={"healing": healing})
