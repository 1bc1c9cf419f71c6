from __future__ import annotations

from typing import Any, Callable

from selfheal.core.models import ElementFingerprint, HealingEvent, StoreSnapshot


class FingerprintStore:
    """Latest fingerprint per element name plus the run's healing event log."""

    def __init__(self) -> None:
        self._fingerprints: dict[str, ElementFingerprint] = {}
        self._events: list[HealingEvent] = []
        self._listeners: list[Callable[[HealingEvent], None]] = []

    def save(self, fingerprint: ElementFingerprint) -> None:
        self._fingerprints[fingerprint.name] = fingerprint

    def get(self, name: str) -> ElementFingerprint | None:
        return self._fingerprints.get(name)

    def has(self, name: str) -> bool:
        return name in self._fingerprints

    def subscribe(self, listener: Callable[[HealingEvent], None]) -> None:
        self._listeners.append(listener)

    def record_event(self, event: HealingEvent) -> None:
        self._events.append(event)
        fingerprint = self._fingerprints.get(event.element_name)
        if fingerprint is not None:
            self._fingerprints[event.element_name] = fingerprint.model_copy(
                update={"heal_count": fingerprint.heal_count + 1, "last_seen": event.timestamp}
            )
        for listener in self._listeners:
            listener(event)

    def all_fingerprints(self) -> list[ElementFingerprint]:
        return list(self._fingerprints.values())

    def all_events(self) -> list[HealingEvent]:
        return list(self._events)

    def clear_events(self) -> None:
        self._events = []

    def export_state(self) -> StoreSnapshot:
        return StoreSnapshot(
            fingerprints=self.all_fingerprints(),
            healing_events=self.all_events(),
        )

    def import_state(self, snapshot: StoreSnapshot | dict[str, Any] | str) -> None:
        if isinstance(snapshot, str):
            snapshot = StoreSnapshot.model_validate_json(snapshot)
        elif isinstance(snapshot, dict):
            snapshot = StoreSnapshot.model_validate(snapshot)
        for fingerprint in snapshot.fingerprints:
            self.save(fingerprint)
        self._events = list(snapshot.healing_events)
