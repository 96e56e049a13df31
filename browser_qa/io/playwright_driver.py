"""
Playwright-based BrowserDriver implementation (sync API, Chromium).

Conforms to io/driver.py's BrowserDriver Protocol:
- find_all(locator) -> list[PlaywrightElement]
- navigate(url)
- execute_script(script, *args)   # WebDriver-style `arguments[n]`
- title / screenshot_png() / quit()

Lifecycle:
- start() launches Chromium once and opens one incognito context + page
- stop() / quit() close everything
- downloads are saved into `download_dir` under their suggested file name,
  so the local download detector can watch that directory

Playwright has no managed-download manifest, so this backend only serves
the local topology.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Download,
    ElementHandle,
    Error as PwError,
    Page,
    Playwright,
    sync_playwright,
)

from ..core.errors import BrowserSetupError, StaleElementError
from ..core.locator import By, Locator
from ..core.settings import Settings
from .driver import SelectStrategy

logger = logging.getLogger(__name__)


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def to_selector(locator: Locator) -> str:
    """Translate a Locator into a Playwright selector string."""
    v = locator.value
    selectors: Dict[By, str] = {
        By.ID: f'[id="{_quote(v)}"]',
        By.NAME: f'[name="{_quote(v)}"]',
        By.CSS: f"css={v}",
        By.XPATH: f"xpath={v}",
        By.TAG: f"css={v}",
        By.LINK_TEXT: f'a:text-is("{_quote(v)}")',
        By.PARTIAL_LINK_TEXT: f'a:has-text("{_quote(v)}")',
        By.CLASS_NAME: f'[class~="{_quote(v)}"]',
    }
    return selectors[locator.by]


@contextmanager
def _translated() -> Iterator[None]:
    try:
        yield
    except PwError as e:
        if "not attached" in str(e):
            raise StaleElementError(str(e)) from e
        raise


class PlaywrightElement:
    """ElementHandle over a Playwright ElementHandle."""

    def __init__(self, handle: ElementHandle) -> None:
        self.handle = handle

    @property
    def text(self) -> str:
        with _translated():
            return self.handle.inner_text()

    @property
    def tag_name(self) -> str:
        with _translated():
            return self.handle.evaluate("e => e.tagName.toLowerCase()")

    def is_displayed(self) -> bool:
        with _translated():
            return self.handle.is_visible()

    def is_enabled(self) -> bool:
        with _translated():
            return self.handle.is_enabled()

    def get_attribute(self, name: str) -> Optional[str]:
        with _translated():
            return self.handle.get_attribute(name)

    def click(self) -> None:
        with _translated():
            self.handle.click()

    def clear(self) -> None:
        with _translated():
            self.handle.fill("")

    def send_keys(self, text: str) -> None:
        with _translated():
            self.handle.type(text)

    def select(self, by: SelectStrategy, key: str | int) -> None:
        with _translated():
            if by == "visible_text":
                self.handle.select_option(label=str(key))
            elif by == "value":
                self.handle.select_option(value=str(key))
            else:
                self.handle.select_option(index=int(key))

    def find_all(self, locator: Locator) -> list["PlaywrightElement"]:
        with _translated():
            return [PlaywrightElement(h) for h in self.handle.query_selector_all(to_selector(locator))]


class PlaywrightDriver:
    """
    A concrete BrowserDriver based on Playwright Chromium.
    One driver owns one incognito context and one page.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        slow_mo_ms: int = 0,
        default_timeout_ms: int = 30_000,
        download_dir: Optional[Path] = None,
    ) -> None:
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.default_timeout_ms = default_timeout_ms
        self.download_dir = download_dir

        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @classmethod
    def launch(cls, settings: Settings, download_dir: Path) -> "PlaywrightDriver":
        driver = cls(
            headless=settings.headless,
            default_timeout_ms=int(settings.wait_timeout_seconds * 1000),
            download_dir=download_dir,
        )
        try:
            driver.start()
        except PwError as e:
            driver.stop()
            raise BrowserSetupError(f"Error launching chromium via playwright: {e.message}") from e
        return driver

    # ---------------- lifecycle ----------------

    def start(self) -> None:
        """Launch Playwright, Chromium and a fresh context + page once."""
        if self._browser is not None:
            return
        self._pw = sync_playwright().start()
        self._browser = self._pw.chromium.launch(headless=self.headless, slow_mo=self.slow_mo_ms)
        self._context = self._browser.new_context(accept_downloads=True)
        self._context.set_default_timeout(self.default_timeout_ms)
        self._page = self._context.new_page()
        self._page.on("download", self._save_download)

    def stop(self) -> None:
        """Close the context and browser and stop Playwright."""
        try:
            if self._context is not None:
                try:
                    self._context.close()
                except PwError as e:
                    logger.debug("context close failed: %s", e)
            if self._browser is not None:
                self._browser.close()
        finally:
            if self._pw is not None:
                self._pw.stop()
            self._pw = None
            self._browser = None
            self._context = None
            self._page = None

    def quit(self) -> None:
        self.stop()

    # ---------------- primitives ----------------

    def find_all(self, locator: Locator) -> list[PlaywrightElement]:
        page = self._require_page()
        with _translated():
            return [PlaywrightElement(h) for h in page.query_selector_all(to_selector(locator))]

    def navigate(self, url: str) -> None:
        self._require_page().goto(url, timeout=self.default_timeout_ms, wait_until="load")

    def execute_script(self, script: str, *args: Any) -> Any:
        raw = [a.handle if isinstance(a, PlaywrightElement) else a for a in args]
        with _translated():
            return self._require_page().evaluate(
                f"(args) => (function () {{ {script} }}).apply(null, args)", raw
            )

    @property
    def title(self) -> str:
        return self._require_page().title()

    def screenshot_png(self) -> bytes:
        return self._require_page().screenshot(full_page=True)

    def pause(self, seconds: float) -> None:
        """
        Sleep that keeps Playwright's event loop running. The sync API only
        dispatches events (downloads included) while it is being called, so
        poll loops on this backend must sleep through here.
        """
        self._require_page().wait_for_timeout(seconds * 1000)

    # ---------------- internals ----------------

    def _save_download(self, download: Download) -> None:
        if self.download_dir is None:
            return
        target = self.download_dir / download.suggested_filename
        target.parent.mkdir(parents=True, exist_ok=True)
        download.save_as(target)
        logger.debug("Saved download %s", target)

    def _require_page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not started. Call start() first.")
        return self._page
