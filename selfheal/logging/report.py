from __future__ import annotations

from collections import Counter
from datetime import datetime

from pydantic import BaseModel, Field

from selfheal.core.models import HealingEvent, utcnow
from selfheal.core.store import FingerprintStore


class HealingSummary(BaseModel):
    by_strategy: dict[str, int] = Field(default_factory=dict)
    by_element: dict[str, int] = Field(default_factory=dict)
    average_confidence: float = 0.0
    success_rate: float = 0.0


class HealingReport(BaseModel):
    generated_at: datetime = Field(default_factory=utcnow)
    total_tests: int = 0
    total_healing_events: int = 0
    events: list[HealingEvent] = Field(default_factory=list)
    summary: HealingSummary = Field(default_factory=HealingSummary)


class HealingReporter:
    """Summarizes a run's healing events for humans and CI."""

    def generate(self, store: FingerprintStore, failed_attempts: int = 0) -> HealingReport:
        events = store.all_events()
        by_strategy = Counter(_strategy_name(event) for event in events)
        by_element = Counter(event.element_name for event in events)
        tests = {(event.test_file, event.test_name) for event in events}
        attempts = len(events) + failed_attempts
        average = sum(event.confidence for event in events) / len(events) if events else 0.0
        return HealingReport(
            total_tests=len(tests),
            total_healing_events=len(events),
            events=events,
            summary=HealingSummary(
                by_strategy=dict(by_strategy),
                by_element=dict(by_element),
                average_confidence=round(average, 4),
                success_rate=round(len(events) / attempts, 4) if attempts else 0.0,
            ),
        )


def render_markdown(report: HealingReport) -> str:
    lines = [
        "# Self-Healing Report",
        "",
        f"Generated: {report.generated_at.isoformat()}",
        "",
        f"- Tests with healed elements: {report.total_tests}",
        f"- Healing events: {report.total_healing_events}",
        f"- Average confidence: {report.summary.average_confidence * 100:.1f}%",
        f"- Success rate: {report.summary.success_rate * 100:.1f}%",
    ]
    if report.summary.by_strategy:
        lines += ["", "## By strategy", "", "| Strategy | Heals |", "|---|---|"]
        for strategy, count in sorted(report.summary.by_strategy.items(), key=lambda item: -item[1]):
            lines.append(f"| {strategy} | {count} |")
    if report.events:
        lines += [
            "",
            "## Events",
            "",
            "| Element | Original locator | Healed locator | Strategy | Confidence | Test |",
            "|---|---|---|---|---|---|",
        ]
        for event in report.events:
            lines.append(
                f"| {event.element_name} | `{event.original_locator}` | `{event.healed_locator}` "
                f"| {_strategy_name(event)} | {event.confidence * 100:.1f}% | {event.test_name or '-'} |"
            )
    return "\n".join(lines) + "\n"


def _strategy_name(event: HealingEvent) -> str:
    return str(getattr(event.strategy, "value", event.strategy))
