from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterable

import pytest
from selenium.common.exceptions import WebDriverException

from selfheal.config.schema import SuiteConfig
from selfheal.core.browser import BrowserSession
from selfheal.core.document import DocumentQuery
from selfheal.core.metadata import QueryResult
from selfheal.core.models import ElementAttributes, ElementPosition, ParentInfo

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
FIXTURES = Path(__file__).resolve().parent / "fixtures"

_ID = re.compile(r"^#([\w-]+)$")
_CLASS = re.compile(r"^\.([\w-]+)$")
_TAG = re.compile(r"^[a-z][a-z0-9]*$")
_ATTRIBUTE = re.compile(r'^\[([\w-]+)="((?:[^"\\]|\\.)*)"\]$')
_TEXT = re.compile(r'^//([a-z0-9]+)\[contains\(normalize-space\(\.\), "([^"]*)"\)\]$')

_ATTRIBUTE_FIELDS = {
    "id": "id",
    "name": "name",
    "placeholder": "placeholder",
    "aria-label": "aria_label",
    "role": "role",
    "type": "type",
    "title": "title",
}


@dataclass(eq=False)
class FakeElement:
    attributes: ElementAttributes
    label: str = ""

    def __repr__(self) -> str:
        return f"FakeElement({self.label or self.attributes.tag_name})"


class FakeDocument(DocumentQuery):
    """In-memory document answering the selector shapes the engine synthesizes."""

    def __init__(
        self,
        elements: Iterable[FakeElement] = (),
        selectors: dict[str, list[FakeElement]] | None = None,
        malformed: Iterable[str] = (),
    ) -> None:
        self.elements = list(elements)
        self.selectors = dict(selectors or {})
        self.malformed = set(malformed)
        self.queries: list[str] = []

    def query(self, selector: str) -> QueryResult:
        self.queries.append(selector)
        if selector in self.malformed:
            return QueryResult.malformed(selector, "invalid selector")
        if selector in self.selectors:
            return QueryResult.of(selector, self.selectors[selector])
        return QueryResult.of(selector, [item for item in self.elements if _matches(item.attributes, selector)])

    def describe(self, element: Any) -> ElementAttributes:
        return element.attributes


def _matches(attributes: ElementAttributes, selector: str) -> bool:
    if match := _ID.match(selector):
        return attributes.id == match.group(1)
    if match := _CLASS.match(selector):
        return match.group(1) in attributes.class_tokens()
    if _TAG.match(selector):
        return attributes.tag_name == selector
    if match := _ATTRIBUTE.match(selector):
        name = match.group(1)
        value = re.sub(r"\\(.)", r"\1", match.group(2))
        if name.startswith("data-"):
            return attributes.data_attributes.get(name) == value
        field = _ATTRIBUTE_FIELDS.get(name)
        return field is not None and getattr(attributes, field) == value
    if match := _TEXT.match(selector):
        text = " ".join((attributes.text or "").split())
        return attributes.tag_name == match.group(1) and match.group(2) in text
    return False


def make_element(tag: str, label: str = "", **fields: Any) -> FakeElement:
    position = fields.pop("position", None)
    if isinstance(position, tuple):
        fields["position"] = ElementPosition(x=position[0], y=position[1], width=position[2], height=position[3])
    elif position is not None:
        fields["position"] = position
    parent = fields.pop("parent", None)
    if isinstance(parent, dict):
        fields["parent_info"] = ParentInfo(**parent)
    return FakeElement(ElementAttributes(tag_name=tag, **fields), label=label)


def login_form() -> dict[str, FakeElement]:
    return {
        "username": make_element(
            "input",
            "username",
            id="username",
            name="username",
            type="text",
            placeholder="Enter username",
            class_name="field",
            data_attributes={"data-testid": "username-input"},
            position=(100, 120, 240, 32),
            parent={"tag_name": "form", "id": "login-form"},
        ),
        "password": make_element(
            "input",
            "password",
            id="password",
            name="password",
            type="password",
            placeholder="Enter password",
            class_name="field",
            data_attributes={"data-testid": "password-input"},
            position=(100, 170, 240, 32),
            parent={"tag_name": "form", "id": "login-form"},
        ),
        "login": make_element(
            "button",
            "login",
            id="login-btn",
            type="submit",
            text="Sign in",
            class_name="btn btn-primary",
            position=(100, 220, 120, 36),
            parent={"tag_name": "form", "id": "login-form"},
        ),
    }


def start_driver_or_skip(suite_config: SuiteConfig):
    try:
        return BrowserSession(suite_config.environment).start()
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {suite_config.environment.browser}: {exc}")


def demo_page_url() -> str:
    return (FIXTURES / "demo_app.html").as_uri()
