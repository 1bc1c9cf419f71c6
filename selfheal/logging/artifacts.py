from __future__ import annotations

import shutil
from pathlib import Path

from selfheal.core.models import StoreSnapshot
from selfheal.logging.report import HealingReport, render_markdown


class ArtifactManager:
    """Writes healing reports and fingerprint snapshots under one artifacts root."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.report_root = self.root / "reports"
        self.json_report_path = self.report_root / "healing-report.json"
        self.markdown_report_path = self.report_root / "healing-report.md"
        self.snapshot_path = self.root / "fingerprints.json"
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self.report_root.mkdir(parents=True, exist_ok=True)

    def write_report(self, report: HealingReport) -> tuple[Path, Path]:
        self._ensure_structure()
        self.json_report_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        self.markdown_report_path.write_text(render_markdown(report), encoding="utf-8")
        return self.json_report_path, self.markdown_report_path

    def write_snapshot(self, snapshot: StoreSnapshot) -> Path:
        self._ensure_structure()
        self.snapshot_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        return self.snapshot_path

    def read_snapshot(self) -> StoreSnapshot | None:
        if not self.snapshot_path.exists():
            return None
        return StoreSnapshot.model_validate_json(self.snapshot_path.read_text(encoding="utf-8"))

    def reset(self) -> Path:
        self._ensure_structure()
        for child in self.root.iterdir():
            if child.is_file() and child.name != ".gitkeep":
                child.unlink()
        self._clear_directory(self.report_root)
        return self.root

    @staticmethod
    def _clear_directory(directory: Path) -> None:
        for child in directory.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            elif child.is_file() and child.name != ".gitkeep":
                child.unlink()
