from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from selfheal.core.models import SIMILARITY, HealingEvent, LocatorStrategy, MatchedBy


class QueryStatus(str, Enum):
    FOUND = "found"
    NO_MATCH = "no_match"
    MALFORMED = "malformed"


@dataclass(slots=True)
class QueryResult:
    selector: str
    status: QueryStatus
    elements: list[Any] = field(default_factory=list)
    error: str = ""

    @classmethod
    def of(cls, selector: str, elements: list[Any]) -> QueryResult:
        status = QueryStatus.FOUND if elements else QueryStatus.NO_MATCH
        return cls(selector=selector, status=status, elements=list(elements))

    @classmethod
    def malformed(cls, selector: str, error: str = "") -> QueryResult:
        return cls(selector=selector, status=QueryStatus.MALFORMED, error=error)

    @property
    def count(self) -> int:
        return len(self.elements)


@dataclass(slots=True)
class MatchResult:
    element: Any | None
    locator: LocatorStrategy | None
    confidence: float
    matched_by: MatchedBy = SIMILARITY

    @property
    def found(self) -> bool:
        return self.element is not None

    @property
    def healed_locator(self) -> str | None:
        return self.locator.selector if self.locator else None


@dataclass(slots=True)
class HealContext:
    """Identifies the calling test and where healing events should be reported."""

    test_file: str = ""
    test_name: str = ""
    emit: Callable[[HealingEvent], None] | None = None


@dataclass(slots=True)
class HealAttempt:
    element_name: str
    original_locator: str
    healed_locator: str
    strategy: str
    confidence: float
    success: bool
    failure_type: str = ""
    test_file: str = ""
    test_name: str = ""
