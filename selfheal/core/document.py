from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from selenium.common.exceptions import InvalidSelectorException
from selenium.webdriver.common.by import By

from selfheal.core.metadata import QueryResult
from selfheal.core.models import ElementAttributes
from selfheal.utils.dom_extract import extract_attributes
from selfheal.utils.selectors import infer_selector_type


class DocumentQuery(ABC):
    """Read-only access to the live document the engine resolves elements in."""

    @abstractmethod
    def query(self, selector: str) -> QueryResult:
        raise NotImplementedError

    @abstractmethod
    def describe(self, element: Any) -> ElementAttributes:
        raise NotImplementedError

    def describe_many(self, elements: list[Any]) -> list[ElementAttributes]:
        return [self.describe(element) for element in elements]


class SeleniumDocument(DocumentQuery):
    def __init__(self, driver) -> None:
        self.driver = driver

    def query(self, selector: str) -> QueryResult:
        by = By.XPATH if infer_selector_type(selector) == "xpath" else By.CSS_SELECTOR
        try:
            matches = self.driver.find_elements(by, selector)
        except InvalidSelectorException as exc:
            return QueryResult.malformed(selector, exc.msg or str(exc))
        return QueryResult.of(selector, matches)

    def describe(self, element: Any) -> ElementAttributes:
        return extract_attributes(self.driver, [element])[0]

    def describe_many(self, elements: list[Any]) -> list[ElementAttributes]:
        return extract_attributes(self.driver, elements)
