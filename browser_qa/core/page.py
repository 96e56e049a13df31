"""
Base class for page objects: the action gateway.

Design:
- Pages declare module/class-level `Locator` constants, never element handles.
- Every helper resolves a fresh element right before acting ("find late, act
  late"), so DOM churn turns into ordinary poll iterations instead of
  stale-element failures.
- Waits and step logging live here so concrete pages stay thin.

Usage:
    class LoginPage(PageObject):
        USERNAME = Locator.name("userName")

        def login(self, user: str) -> None:
            self.type_text(self.USERNAME, user)
"""
# @file purpose: Locator-based page object helpers with explicit waits.

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..io.driver import ElementHandle
from .errors import ElementNotFoundError, ElementTimeoutError, UnexpectedTagError
from .locator import Locator
from .session import Session
from .wait import Readiness, WaitContract, Waiter, await_ready

logger = logging.getLogger(__name__)

JS_CLICK = "arguments[0].click();"


class SelectBy(str, Enum):
    VISIBLE_TEXT = "visible_text"
    VALUE = "value"
    INDEX = "index"


class PageObject:
    """
    Page objects share one wait contract per instance. The timeout comes from
    settings (`wait_timeout_seconds`, default 20s) unless the page passes its
    own override.
    """

    def __init__(self, session: Session, timeout: Optional[float] = None) -> None:
        self.session = session
        self.driver = session.driver
        self.contract = WaitContract.from_settings(session.settings, timeout)
        self.waiter = Waiter(self.contract, clock=session.clock, sleep=session.sleep)

    # ------------------------------------------------------------------
    # waiting
    # ------------------------------------------------------------------

    def await_ready(self, locator: Locator, readiness: Readiness) -> ElementHandle:
        try:
            return await_ready(self.driver, locator, readiness, self.waiter)
        except ElementTimeoutError:
            self.session.log_step(f"[ERROR] Timeout waiting for: {self.describe(locator)}")
            raise

    def present(self, locator: Locator) -> ElementHandle:
        return self.await_ready(locator, Readiness.EXISTS)

    def visible(self, locator: Locator) -> ElementHandle:
        """Wait until an element matching `locator` is displayed and return it."""
        return self.await_ready(locator, Readiness.VISIBLE)

    def clickable(self, locator: Locator) -> ElementHandle:
        """Wait until an element matching `locator` is displayed and enabled."""
        return self.await_ready(locator, Readiness.CLICKABLE)

    def wait_for_visibility(self, locator: Locator) -> None:
        self.visible(locator)

    # ------------------------------------------------------------------
    # actions
    # ------------------------------------------------------------------

    def click(self, locator: Locator) -> None:
        self.clickable(locator).click()
        self.session.log_step(f"[ACTION] Clicked on the element: {self.describe(locator)}")

    def click_via_script(self, locator: Locator) -> None:
        """
        Script click for elements a native click cannot reach (overlays).
        Immediate lookup, no clickability wait. Prefer click().
        """
        elements = self.driver.find_all(locator)
        if not elements:
            raise ElementNotFoundError(f"No element found for {self.describe(locator)}")
        self.driver.execute_script(JS_CLICK, elements[0])
        self.session.log_step(f"[ACTION] JS Clicked on the element: {self.describe(locator)}")

    def type_text(self, locator: Locator, text: str) -> None:
        """Clear then type. Not atomic; a failure between the two surfaces as-is."""
        el = self.visible(locator)
        el.clear()
        el.send_keys(text)
        self.session.log_step(
            f"[ACTION] Sent the text: '{text}' to the element: {self.describe(locator)}"
        )

    def select_option(self, locator: Locator, by: SelectBy, key: str | int) -> None:
        el = self.visible(locator)
        tag = (el.tag_name or "").lower()
        if tag != "select":
            raise UnexpectedTagError(
                f"Expected <select> for {self.describe(locator)}, got <{tag}>"
            )
        strategy = SelectBy(by)
        el.select(strategy.value, int(key) if strategy is SelectBy.INDEX else str(key))
        self.session.log_step(
            f"Selected the option by {strategy.value.replace('_', ' ')}: '{key}' "
            f"on the following dropdown: {self.describe(locator)}"
        )

    def read_text(self, locator: Locator) -> str:
        return self.visible(locator).text

    def exists(self, locator: Locator) -> bool:
        """Non-waiting: true iff at least one element matches right now."""
        return len(self.driver.find_all(locator)) > 0

    # ------------------------------------------------------------------
    # page-level
    # ------------------------------------------------------------------

    def navigate(self, url: str) -> None:
        self.session.navigate(url)

    def page_title(self) -> str:
        return self.driver.title

    @staticmethod
    def describe(locator: Optional[Locator]) -> str:
        return str(locator) if locator is not None else "[null locator]"
