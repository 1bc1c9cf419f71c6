from __future__ import annotations

import logging

from selfheal.core.document import DocumentQuery
from selfheal.core.metadata import MatchResult, QueryStatus
from selfheal.core.models import SIMILARITY, ElementAttributes, ElementFingerprint
from selfheal.utils.scoring import rank_candidates

log = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.6


class ElementMatcher:
    """Re-locates a fingerprinted element through its alternative locators, then by similarity."""

    def __init__(self, confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> None:
        self.confidence_threshold = confidence_threshold

    def match(self, fingerprint: ElementFingerprint, document: DocumentQuery) -> MatchResult:
        for locator in fingerprint.alternative_locators:
            result = document.query(locator.selector)
            if result.status is QueryStatus.MALFORMED:
                log.debug("Skipping malformed %s locator %s: %s", locator.kind.value, locator.selector, result.error)
                continue
            if result.status is QueryStatus.NO_MATCH:
                continue

            if result.count == 1:
                return MatchResult(
                    element=result.elements[0],
                    locator=locator,
                    confidence=locator.confidence,
                    matched_by=locator.kind,
                )

            element, score = self._best_match(document, result.elements, fingerprint.attributes)
            if element is not None and score >= self.confidence_threshold:
                return MatchResult(
                    element=element,
                    locator=locator,
                    confidence=score,
                    matched_by=locator.kind,
                )
            log.debug(
                "%s locator %s matched %d elements, best score %.3f below threshold",
                locator.kind.value,
                locator.selector,
                result.count,
                score,
            )

        return self.find_by_similarity(fingerprint.attributes, document)

    def find_by_similarity(self, target: ElementAttributes, document: DocumentQuery) -> MatchResult:
        if not target.tag_name:
            return MatchResult(element=None, locator=None, confidence=0.0, matched_by=SIMILARITY)

        result = document.query(target.tag_name)
        if result.status is not QueryStatus.FOUND:
            return MatchResult(element=None, locator=None, confidence=0.0, matched_by=SIMILARITY)

        element, score = self._best_match(document, result.elements, target)
        if score < self.confidence_threshold:
            element = None
        return MatchResult(element=element, locator=None, confidence=score, matched_by=SIMILARITY)

    @staticmethod
    def _best_match(document: DocumentQuery, elements: list, target: ElementAttributes):
        snapshots = document.describe_many(elements)
        ranked = rank_candidates(zip(elements, snapshots), target)
        if not ranked or ranked[0][1] <= 0:
            return None, 0.0
        return ranked[0]
