"""
Selenium-based BrowserDriver implementation.

Conforms to io/driver.py's protocols:
- BrowserDriver: find_all / navigate / execute_script / title / screenshot_png / quit
- ElementHandle (SeleniumElement): wraps a WebElement and translates
  Selenium's stale/not-interactable exceptions into core.errors types
- RemoteDownloads: Grid managed downloads (requires `se:downloadsEnabled`)

`create_driver()` provisions a local Chrome/Firefox/Edge or a Grid session
from settings.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

from selenium import webdriver
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    InvalidElementStateException,
    StaleElementReferenceException,
    UnexpectedTagNameException,
    WebDriverException,
)
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.select import Select

from ..core.errors import (
    BrowserSetupError,
    ElementNotInteractableError,
    StaleElementError,
    UnexpectedTagError,
)
from ..core.locator import Locator
from ..core.settings import Settings
from .driver import SelectStrategy
from .options import builder_for, configure_options

logger = logging.getLogger(__name__)


@contextmanager
def _translated() -> Iterator[None]:
    try:
        yield
    except StaleElementReferenceException as e:
        raise StaleElementError(e.msg or "stale element reference") from e
    except (
        ElementNotInteractableException,
        ElementClickInterceptedException,
        InvalidElementStateException,
    ) as e:
        raise ElementNotInteractableError(e.msg or "element not interactable") from e
    except UnexpectedTagNameException as e:
        raise UnexpectedTagError(e.msg or "unexpected tag name") from e


class SeleniumElement:
    """ElementHandle over a Selenium WebElement."""

    def __init__(self, element: WebElement) -> None:
        self.element = element

    @property
    def text(self) -> str:
        with _translated():
            return self.element.text

    @property
    def tag_name(self) -> str:
        with _translated():
            return self.element.tag_name

    def is_displayed(self) -> bool:
        with _translated():
            return self.element.is_displayed()

    def is_enabled(self) -> bool:
        with _translated():
            return self.element.is_enabled()

    def get_attribute(self, name: str) -> str | None:
        with _translated():
            return self.element.get_attribute(name)

    def click(self) -> None:
        with _translated():
            self.element.click()

    def clear(self) -> None:
        with _translated():
            self.element.clear()

    def send_keys(self, text: str) -> None:
        with _translated():
            self.element.send_keys(text)

    def select(self, by: SelectStrategy, key: str | int) -> None:
        with _translated():
            sel = Select(self.element)
            if by == "visible_text":
                sel.select_by_visible_text(str(key))
            elif by == "value":
                sel.select_by_value(str(key))
            else:
                sel.select_by_index(int(key))

    def find_all(self, locator: Locator) -> list["SeleniumElement"]:
        with _translated():
            found = self.element.find_elements(locator.by.value, locator.value)
        return [SeleniumElement(e) for e in found]


class SeleniumDriver:
    """
    A concrete BrowserDriver over any Selenium WebDriver (local or Remote).
    Also serves as the RemoteDownloads capability of a Grid session.
    """

    def __init__(self, driver: WebDriver) -> None:
        self.driver = driver

    # ---------------- BrowserDriver ----------------

    def find_all(self, locator: Locator) -> list[SeleniumElement]:
        with _translated():
            found = self.driver.find_elements(locator.by.value, locator.value)
        return [SeleniumElement(e) for e in found]

    def navigate(self, url: str) -> None:
        self.driver.get(url)

    def execute_script(self, script: str, *args: Any) -> Any:
        raw = [a.element if isinstance(a, SeleniumElement) else a for a in args]
        with _translated():
            return self.driver.execute_script(script, *raw)

    @property
    def title(self) -> str:
        return self.driver.title

    def screenshot_png(self) -> bytes:
        return self.driver.get_screenshot_as_png()

    def quit(self) -> None:
        self.driver.quit()

    # ---------------- RemoteDownloads ----------------

    def list_downloadable_names(self) -> list[str]:
        files = self.driver.get_downloadable_files()
        # older clients return {"names": [...]}
        if isinstance(files, dict):
            files = files.get("names", [])
        return [str(n) for n in files]

    def fetch(self, name: str, destination_dir: Path) -> None:
        target = Path(destination_dir)
        if (target / name).exists():
            raise FileExistsError(f"{target / name} already exists")
        target.mkdir(parents=True, exist_ok=True)
        self.driver.download_file(name, str(target))

    def clear_downloadable_files(self) -> None:
        self.driver.delete_downloadable_files()


_LOCAL_DRIVERS: dict[str, Callable[..., WebDriver]] = {
    "chrome": webdriver.Chrome,
    "firefox": webdriver.Firefox,
    "edge": webdriver.Edge,
}


def create_driver(settings: Settings, download_dir: Path) -> SeleniumDriver:
    """Build a configured WebDriver (local or Grid) and wrap it."""
    options = configure_options(builder_for(settings.browser), settings, download_dir)
    try:
        if settings.remote:
            logger.info("Remote Grid URL being used: %s", settings.grid_url)
            raw: WebDriver = webdriver.Remote(command_executor=settings.grid_url, options=options)
        else:
            raw = _LOCAL_DRIVERS[settings.browser](options=options)
    except WebDriverException as e:
        where = settings.grid_url if settings.remote else "local"
        raise BrowserSetupError(f"Error creating {settings.browser} driver ({where})") from e

    if settings.remote or settings.headless:
        raw.set_window_size(1920, 1080)
    else:
        raw.maximize_window()
    return SeleniumDriver(raw)
