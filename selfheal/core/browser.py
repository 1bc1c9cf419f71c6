from __future__ import annotations

from selenium import webdriver
from selenium.common.exceptions import TimeoutException
from selenium.webdriver import ChromeOptions, FirefoxOptions

from selfheal.config.schema import EnvironmentConfig
from selfheal.utils.wait import document_ready, wait_until


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def start(self, browser_name: str | None = None):
        normalized = (browser_name or self.environment.browser).lower()
        if normalized == "chrome":
            options = ChromeOptions()
            if self.environment.headless:
                options.add_argument("--headless=new")
            options.add_argument("--window-size=1280,720")
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if self.environment.headless:
                options.add_argument("-headless")
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.default_timeout_seconds)
        driver.implicitly_wait(0)
        return driver

    def open(self, driver, url: str) -> None:
        driver.get(url)
        if not wait_until(lambda: document_ready(driver), self.environment.default_timeout_seconds):
            raise TimeoutException(f"Document did not finish loading: {url}")
