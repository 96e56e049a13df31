"""
Deprecated helpers that act on an already-resolved element handle.

Kept only so suites can migrate page by page. They are weaker than the
locator-based PageObject API: a handle that went stale is never re-found,
so a wait on it reports "not visible yet" on every poll and runs to the full
timeout instead of failing early. Prefer PageObject methods.
"""
# @file purpose: Isolated, deprecated handle-based page helpers.

from __future__ import annotations

import warnings

from ..io.driver import ElementHandle
from .errors import TRANSIENT_ELEMENT_ERRORS, BrowserQAError, ElementTimeoutError
from .page import JS_CLICK, PageObject


def describe_handle(element: ElementHandle | None) -> str:
    """`<tag name='..' id='..' text='..'>`, robust to stale handles."""
    if element is None:
        return "[null element]"
    try:
        tag = element.tag_name
        text = (element.text or "").strip()
        el_id = element.get_attribute("id")
        name = element.get_attribute("name")
        return f"<{tag} name='{name}' id='{el_id}' text='{text}'>"
    except TRANSIENT_ELEMENT_ERRORS:
        return "[STALE ELEMENT]"
    except BrowserQAError:
        return "[UNKNOWN ELEMENT]"


def _deprecated(name: str) -> None:
    warnings.warn(
        f"LegacyHandleActions.{name} is deprecated; use the Locator-based PageObject API",
        DeprecationWarning,
        stacklevel=3,
    )


class LegacyHandleActions:
    """Handle-based counterparts of PageObject actions, bound to a page's wait contract."""

    def __init__(self, page: PageObject) -> None:
        self.page = page

    def wait_visible(self, element: ElementHandle) -> ElementHandle:
        _deprecated("wait_visible")
        page = self.page
        desc = describe_handle(element)
        page.session.log_step(f"[WAIT] Visibility(el): {desc}")

        def _displayed() -> ElementHandle | None:
            # stale reads as "not visible" here, see module docstring
            try:
                return element if element.is_displayed() else None
            except TRANSIENT_ELEMENT_ERRORS:
                return None

        try:
            page.waiter.until(
                _displayed,
                f"{desc} to be visible",
                on_timeout=lambda: ElementTimeoutError(desc, "visible", page.contract.timeout),
            )
        except ElementTimeoutError:
            page.session.log_step(f"[ERROR] Timeout waiting for element visibility: {desc}")
            raise
        page.session.log_step("[WAIT] Element visible.")
        return element

    def type_text(self, element: ElementHandle, text: str) -> None:
        _deprecated("type_text")
        self.wait_visible(element)
        self.page.session.log_step(f"[ACTION] Type(el): {describe_handle(element)} | Text: {text}")
        element.clear()
        element.send_keys(text)

    def click(self, element: ElementHandle) -> None:
        _deprecated("click")
        self.wait_visible(element)
        self.page.session.log_step(f"[ACTION] Click(el): {describe_handle(element)}")
        element.click()

    def click_via_script(self, element: ElementHandle) -> None:
        _deprecated("click_via_script")
        self.page.session.log_step(f"[ACTION] JS Click(el): {describe_handle(element)}")
        self.page.driver.execute_script(JS_CLICK, element)

    def read_text(self, element: ElementHandle) -> str:
        _deprecated("read_text")
        self.wait_visible(element)
        return element.text
