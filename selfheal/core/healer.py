from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable

from selfheal.config.schema import HealingConfig
from selfheal.core.document import DocumentQuery
from selfheal.core.exceptions import (
    ElementNotFoundError,
    LowConfidenceError,
    NoFingerprintError,
)
from selfheal.core.fingerprint import capture_fingerprint
from selfheal.core.matcher import ElementMatcher
from selfheal.core.metadata import HealAttempt, HealContext, MatchResult, QueryStatus
from selfheal.core.models import SIMILARITY_LOCATOR, HealingEvent, utcnow
from selfheal.core.store import FingerprintStore
from selfheal.logging.audit import HealingAuditLogger

log = logging.getLogger(__name__)


class SelfHealingEngine:
    """Resolves named elements, healing broken locators from stored fingerprints."""

    def __init__(
        self,
        config: HealingConfig | None = None,
        store: FingerprintStore | None = None,
        matcher: ElementMatcher | None = None,
        clock: Callable[[], datetime] = utcnow,
        event_sinks: Iterable[Callable[[HealingEvent], None]] = (),
        audit_logger: HealingAuditLogger | None = None,
    ) -> None:
        self.config = config or HealingConfig()
        self.store = store if store is not None else FingerprintStore()
        self.matcher = matcher or ElementMatcher(self.config.confidence_threshold)
        if self.matcher.confidence_threshold != self.config.confidence_threshold:
            raise ValueError(
                f"matcher threshold {self.matcher.confidence_threshold} does not match "
                f"configured confidence_threshold {self.config.confidence_threshold}"
            )
        self.clock = clock
        self.audit_logger = audit_logger
        for sink in event_sinks:
            self.store.subscribe(sink)

    @property
    def confidence_threshold(self) -> float:
        return self.config.confidence_threshold

    def find(
        self,
        document: DocumentQuery,
        locator: str,
        name: str,
        context: HealContext | None = None,
    ) -> Any:
        context = context or HealContext()
        result = document.query(locator)
        if result.status is QueryStatus.FOUND and result.count == 1:
            element = result.elements[0]
            self._refresh(document, element, name, locator)
            return element

        if not self.config.enabled:
            raise ElementNotFoundError(locator, result.count, healing_disabled=True)
        return self._heal(document, locator, name, context)

    heal = find

    def register(self, document: DocumentQuery, locator: str, name: str) -> Any:
        result = document.query(locator)
        if result.status is not QueryStatus.FOUND:
            raise ElementNotFoundError(locator)
        element = result.elements[0]
        fingerprint = capture_fingerprint(document, element, name, locator, now=self.clock())
        self.store.save(fingerprint)
        log.info(
            'Registered "%s" for self-healing via %s (%d alternative locators)',
            name,
            locator,
            len(fingerprint.alternative_locators),
        )
        return element

    def _refresh(self, document: DocumentQuery, element: Any, name: str, locator: str) -> None:
        fingerprint = capture_fingerprint(document, element, name, locator, now=self.clock())
        previous = self.store.get(name)
        if previous is not None and previous.heal_count:
            fingerprint = fingerprint.model_copy(update={"heal_count": previous.heal_count})
        self.store.save(fingerprint)

    def _heal(self, document: DocumentQuery, locator: str, name: str, context: HealContext) -> Any:
        result: MatchResult | None = None
        success = False
        failure_type = ""
        try:
            fingerprint = self.store.get(name)
            if fingerprint is None:
                raise NoFingerprintError(name, locator)
            result = self.matcher.match(fingerprint, document)
            if not result.found or result.confidence < self.confidence_threshold:
                raise LowConfidenceError(name, result.confidence, self.confidence_threshold)
            success = True
        except Exception as exc:  # noqa: BLE001 - audit logging needs the concrete failure.
            failure_type = type(exc).__name__
            raise
        finally:
            if self.audit_logger is not None:
                self.audit_logger.write(self._attempt(name, locator, context, result, success, failure_type))

        event = HealingEvent(
            timestamp=self.clock(),
            element_name=name,
            original_locator=locator,
            healed_locator=result.healed_locator or SIMILARITY_LOCATOR,
            strategy=result.matched_by,
            confidence=result.confidence,
            test_file=context.test_file,
            test_name=context.test_name,
        )
        self.store.record_event(event)

        self._notify(event)
        if context.emit is not None:
            context.emit(event)
        return result.element

    @staticmethod
    def _attempt(
        name: str,
        locator: str,
        context: HealContext,
        result: MatchResult | None,
        success: bool,
        failure_type: str,
    ) -> HealAttempt:
        return HealAttempt(
            element_name=name,
            original_locator=locator,
            healed_locator=(result.healed_locator or SIMILARITY_LOCATOR) if result and result.found else "",
            strategy=str(getattr(result.matched_by, "value", result.matched_by)) if result else "",
            confidence=result.confidence if result else 0.0,
            success=success,
            failure_type=failure_type,
            test_file=context.test_file,
            test_name=context.test_name,
        )

    @staticmethod
    def _notify(event: HealingEvent) -> None:
        strategy = getattr(event.strategy, "value", event.strategy)
        log.warning(
            "SELF-HEALED %r: original locator %s failed, found via %s (%s) at %.1f%% confidence [%s::%s]",
            event.element_name,
            event.original_locator,
            strategy,
            event.healed_locator,
            event.confidence * 100,
            event.test_file or "-",
            event.test_name or "-",
        )
