from __future__ import annotations

from math import hypot
from typing import Iterable, TypeVar

from selfheal.core.models import ElementAttributes, ElementPosition

SIGNAL_WEIGHTS: dict[str, float] = {
    "text": 0.25,
    "aria_label": 0.20,
    "data_attributes": 0.15,
    "placeholder": 0.10,
    "name": 0.10,
    "class_name": 0.05,
    "position": 0.10,
    "role": 0.05,
}

MAX_POSITION_DISTANCE = 200.0
SIZE_TOLERANCE = 50.0

T = TypeVar("T")


def calculate_similarity_score(candidate: ElementAttributes, target: ElementAttributes) -> float:
    """Weighted similarity over the signals the target actually carries."""

    total_score = 0.0
    total_weight = 0.0
    for signal, score in _signal_scores(candidate, target):
        weight = SIGNAL_WEIGHTS[signal]
        total_score += score * weight
        total_weight += weight
    if total_weight == 0:
        return 0.0
    return total_score / total_weight


def rank_candidates(
    candidates: Iterable[tuple[T, ElementAttributes]],
    target: ElementAttributes,
) -> list[tuple[T, float]]:
    scored = [(item, calculate_similarity_score(attributes, target)) for item, attributes in candidates]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored


def _signal_scores(candidate: ElementAttributes, target: ElementAttributes):
    if target.text:
        yield "text", string_similarity(candidate.text or "", target.text)
    if target.aria_label:
        yield "aria_label", _exact(candidate.aria_label, target.aria_label)
    if target.data_attributes:
        matched = sum(
            1 for key, value in target.data_attributes.items() if candidate.data_attributes.get(key) == value
        )
        yield "data_attributes", matched / len(target.data_attributes)
    if target.placeholder:
        yield "placeholder", _exact(candidate.placeholder, target.placeholder)
    if target.name:
        yield "name", _exact(candidate.name, target.name)
    if target.class_name:
        yield "class_name", class_overlap(target.class_name, candidate.class_name or "")
    if target.position:
        yield "position", position_similarity(candidate.position, target.position)
    if target.role:
        yield "role", _exact(candidate.role, target.role)


def _exact(actual: str | None, expected: str) -> float:
    return 1.0 if actual == expected else 0.0


def levenshtein_distance(left: str, right: str) -> int:
    if len(left) < len(right):
        left, right = right, left
    previous = list(range(len(right) + 1))
    for row, left_char in enumerate(left, start=1):
        current = [row]
        for column, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(
                min(
                    previous[column] + 1,
                    current[column - 1] + 1,
                    previous[column - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def string_similarity(left: str, right: str) -> float:
    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    longer = max(len(left), len(right))
    return (longer - levenshtein_distance(left, right)) / longer


def class_overlap(expected: str, actual: str) -> float:
    """Share of the expected class tokens present on the candidate."""

    left = set(expected.split())
    right = set(actual.split())
    if not left:
        return 0.0
    return len(left & right) / len(left)


def position_similarity(actual: ElementPosition | None, expected: ElementPosition) -> float:
    if actual is None:
        return 0.0
    distance = hypot(actual.x - expected.x, actual.y - expected.y)
    proximity = max(0.0, 1.0 - distance / MAX_POSITION_DISTANCE) * 0.5
    same_size = (
        abs(actual.width - expected.width) < SIZE_TOLERANCE
        and abs(actual.height - expected.height) < SIZE_TOLERANCE
    )
    return proximity + (0.5 if same_size else 0.0)
