from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from selfheal.core.metadata import HealAttempt


class HealingAuditLogger:
    """Appends every heal attempt, successful or not, to a JSON-lines file."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.healed_elements_path = self.root / "healed_elements.jsonl"

    def write(self, attempt: HealAttempt) -> None:
        with self.healed_elements_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(attempt)) + "\n")

    def read_attempts(self) -> list[dict[str, Any]]:
        if not self.healed_elements_path.exists():
            return []
        attempts: list[dict[str, Any]] = []
        with self.healed_elements_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    attempts.append(json.loads(line))
        return attempts

    def failed_attempts(self) -> int:
        return sum(1 for attempt in self.read_attempts() if not attempt.get("success"))

    def reset(self) -> None:
        self.healed_elements_path.unlink(missing_ok=True)
