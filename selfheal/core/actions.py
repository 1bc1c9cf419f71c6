from __future__ import annotations

from selenium.common.exceptions import (
    ElementNotInteractableException,
    StaleElementReferenceException,
)

from selfheal.core.metadata import HealContext


class SafeActions:
    """High-level browser actions routed through the healing engine."""

    def __init__(self, document, engine, context: HealContext | None = None) -> None:
        self.document = document
        self.engine = engine
        self.context = context

    def find(self, locator: str, name: str):
        return self.engine.find(self.document, locator, name, self.context)

    def register(self, locator: str, name: str):
        return self.engine.register(self.document, locator, name)

    def click(self, locator: str, name: str) -> None:
        element = self.find(locator, name)
        try:
            element.click()
        except (ElementNotInteractableException, StaleElementReferenceException):
            self.find(locator, name).click()

    def type(self, locator: str, name: str, value: str, clear_first: bool = True) -> None:
        element = self.find(locator, name)
        try:
            if clear_first:
                element.clear()
            element.send_keys(value)
        except (ElementNotInteractableException, StaleElementReferenceException):
            element = self.find(locator, name)
            if clear_first:
                element.clear()
            element.send_keys(value)
