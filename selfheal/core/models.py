from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

TEXT_LIMIT = 100
SIMILARITY = "similarity"
SIMILARITY_LOCATOR = "similarity-based"


class LocatorKind(str, Enum):
    TEST_ID = "data-testid"
    FRAMEWORK_TEST_ID = "data-cy"
    ID = "id"
    ARIA_LABEL = "aria-label"
    NAME = "name"
    PLACEHOLDER = "placeholder"
    ROLE = "role"
    TEXT = "text"
    CLASS = "class"
    CSS = "css"
    XPATH = "xpath"


MatchedBy = LocatorKind | Literal["similarity"]


def utcnow() -> datetime:
    return datetime.now(UTC)


class ElementPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float


class ParentInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag_name: str
    class_name: str | None = None
    id: str | None = None

    @field_validator("class_name", "id", mode="before")
    @classmethod
    def blank_as_absent(cls, value):
        return value or None


class ElementAttributes(BaseModel):
    """Observable properties of one element at capture time.

    ``None`` means the property does not apply to the element; blank strings
    coming from the browser are folded into ``None``.
    """

    model_config = ConfigDict(frozen=True)

    tag_name: str
    text: str | None = None
    inner_text: str | None = None
    class_name: str | None = None
    id: str | None = None
    name: str | None = None
    placeholder: str | None = None
    title: str | None = None
    aria_label: str | None = None
    role: str | None = None
    type: str | None = None
    href: str | None = None
    src: str | None = None
    value: str | None = None
    data_attributes: dict[str, str] = Field(default_factory=dict)
    position: ElementPosition | None = None
    parent_info: ParentInfo | None = None

    @field_validator("tag_name")
    @classmethod
    def lower_tag(cls, value: str) -> str:
        return value.lower()

    @field_validator(
        "class_name",
        "id",
        "name",
        "placeholder",
        "title",
        "aria_label",
        "role",
        "type",
        "href",
        "src",
        "value",
        mode="before",
    )
    @classmethod
    def blank_as_absent(cls, value):
        return value or None

    @field_validator("text", "inner_text", mode="before")
    @classmethod
    def trim_text(cls, value):
        if not value:
            return None
        return value.strip()[:TEXT_LIMIT] or None

    @field_validator("data_attributes", mode="before")
    @classmethod
    def data_prefixed_only(cls, value):
        if not value:
            return {}
        return {key: str(item) for key, item in value.items() if key.startswith("data-")}

    def class_tokens(self) -> list[str]:
        return self.class_name.split() if self.class_name else []


class LocatorStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: LocatorKind
    selector: str
    priority: int
    confidence: float


class ElementFingerprint(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    primary_locator: str
    alternative_locators: tuple[LocatorStrategy, ...] = ()
    attributes: ElementAttributes
    last_seen: datetime = Field(default_factory=utcnow)
    heal_count: int = Field(default=0, ge=0)

    @field_validator("alternative_locators")
    @classmethod
    def ordered_by_priority(cls, value: tuple[LocatorStrategy, ...]) -> tuple[LocatorStrategy, ...]:
        return tuple(sorted(value, key=lambda item: item.priority))


class HealingEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utcnow)
    element_name: str
    original_locator: str
    healed_locator: str
    strategy: MatchedBy
    confidence: float
    test_file: str = ""
    test_name: str = ""


class StoreSnapshot(BaseModel):
    fingerprints: list[ElementFingerprint] = Field(default_factory=list)
    healing_events: list[HealingEvent] = Field(default_factory=list)
