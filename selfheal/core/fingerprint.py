from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from selfheal.core.models import (
    ElementAttributes,
    ElementFingerprint,
    LocatorKind,
    LocatorStrategy,
    utcnow,
)
from selfheal.utils.selectors import css_identifier, css_string, xpath_literal

TEXT_LOCATOR_MAX_LENGTH = 50


@dataclass(frozen=True, slots=True)
class StrategyRule:
    """One locator strategy: fixed rank plus a builder that returns None when it does not apply."""

    kind: LocatorKind
    priority: int
    confidence: float
    build: Callable[[ElementAttributes], str | None]

    def synthesize(self, attributes: ElementAttributes) -> LocatorStrategy | None:
        selector = self.build(attributes)
        if not selector:
            return None
        return LocatorStrategy(
            kind=self.kind,
            selector=selector,
            priority=self.priority,
            confidence=self.confidence,
        )


def _data_attribute(name: str) -> Callable[[ElementAttributes], str | None]:
    def build(attributes: ElementAttributes) -> str | None:
        value = attributes.data_attributes.get(name)
        if not value:
            return None
        return f"[{name}={css_string(value)}]"

    return build


def _by_id(attributes: ElementAttributes) -> str | None:
    if not attributes.id:
        return None
    return f"#{css_identifier(attributes.id)}"


def _by_aria_label(attributes: ElementAttributes) -> str | None:
    if not attributes.aria_label:
        return None
    return f"[aria-label={css_string(attributes.aria_label)}]"


def _by_name(attributes: ElementAttributes) -> str | None:
    if not attributes.name:
        return None
    return f"[name={css_string(attributes.name)}]"


def _by_placeholder(attributes: ElementAttributes) -> str | None:
    if not attributes.placeholder:
        return None
    return f"[placeholder={css_string(attributes.placeholder)}]"


def _by_role(attributes: ElementAttributes) -> str | None:
    # Needs text as well, but the selector itself only carries the role.
    if not attributes.role or not attributes.text:
        return None
    return f"[role={css_string(attributes.role)}]"


def _by_text(attributes: ElementAttributes) -> str | None:
    if not attributes.text or len(attributes.text) >= TEXT_LOCATOR_MAX_LENGTH:
        return None
    normalized = " ".join(attributes.text.split())
    return f"//{attributes.tag_name}[contains(normalize-space(.), {xpath_literal(normalized)})]"


def _by_class(attributes: ElementAttributes) -> str | None:
    tokens = attributes.class_tokens()
    if len(tokens) != 1 or attributes.class_name != tokens[0]:
        return None
    return f".{css_identifier(tokens[0])}"


def _by_context(attributes: ElementAttributes) -> str | None:
    parts: list[str] = []
    parent = attributes.parent_info
    if parent and parent.id:
        parts.append(f"#{css_identifier(parent.id)}")
    elif parent and parent.class_name and parent.class_name.split():
        parts.append(f".{css_identifier(parent.class_name.split()[0])}")

    element_selector = attributes.tag_name
    if attributes.type:
        element_selector += f"[type={css_string(attributes.type)}]"
    if not parts and not attributes.type:
        return None
    parts.append(element_selector)
    return " > ".join(parts)


STRATEGY_RULES: tuple[StrategyRule, ...] = (
    StrategyRule(LocatorKind.TEST_ID, 1, 0.95, _data_attribute("data-testid")),
    StrategyRule(LocatorKind.FRAMEWORK_TEST_ID, 2, 0.95, _data_attribute("data-cy")),
    StrategyRule(LocatorKind.ID, 3, 0.90, _by_id),
    StrategyRule(LocatorKind.ARIA_LABEL, 4, 0.85, _by_aria_label),
    StrategyRule(LocatorKind.NAME, 5, 0.80, _by_name),
    StrategyRule(LocatorKind.PLACEHOLDER, 6, 0.75, _by_placeholder),
    StrategyRule(LocatorKind.ROLE, 7, 0.70, _by_role),
    StrategyRule(LocatorKind.TEXT, 8, 0.70, _by_text),
    StrategyRule(LocatorKind.CLASS, 9, 0.50, _by_class),
    StrategyRule(LocatorKind.CSS, 10, 0.60, _by_context),
)


def generate_alternative_locators(attributes: ElementAttributes) -> tuple[LocatorStrategy, ...]:
    locators = [rule.synthesize(attributes) for rule in STRATEGY_RULES]
    present = [locator for locator in locators if locator is not None]
    return tuple(sorted(present, key=lambda item: item.priority))


def build_fingerprint(
    attributes: ElementAttributes,
    name: str,
    primary_locator: str,
    *,
    now: datetime | None = None,
) -> ElementFingerprint:
    return ElementFingerprint(
        name=name,
        primary_locator=primary_locator,
        alternative_locators=generate_alternative_locators(attributes),
        attributes=attributes,
        last_seen=now or utcnow(),
        heal_count=0,
    )


def capture_fingerprint(
    document,
    element,
    name: str,
    primary_locator: str,
    *,
    now: datetime | None = None,
) -> ElementFingerprint:
    """Snapshots a live element and derives its ranked alternative locators."""

    return build_fingerprint(document.describe(element), name, primary_locator, now=now)
