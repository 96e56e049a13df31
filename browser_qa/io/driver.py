"""
Browser driver protocols (abstraction).

These Protocols define the minimal browser surface the wait engine, the
page objects and the download detector rely on. Backends (Selenium,
Playwright) adapt their native objects to them.

Notes:
- Element handles describe one DOM node at lookup time; any member may
  raise StaleElementError / ElementNotInteractableError from core.errors.
  Adapters translate their backend's exceptions into those.
- `find_all` never waits: it returns whatever matches right now (possibly
  an empty list).
- `execute_script` follows WebDriver semantics: the script body sees its
  extra arguments as `arguments[0..n]`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

from ..core.locator import Locator

SelectStrategy = Literal["visible_text", "value", "index"]


class ElementHandle(Protocol):
    @property
    def text(self) -> str: ...
    @property
    def tag_name(self) -> str: ...

    def is_displayed(self) -> bool: ...
    def is_enabled(self) -> bool: ...
    def get_attribute(self, name: str) -> str | None: ...

    # -------- interactions --------
    def click(self) -> None: ...
    def clear(self) -> None: ...
    def send_keys(self, text: str) -> None: ...
    def select(self, by: SelectStrategy, key: str | int) -> None: ...

    # -------- scoped lookup --------
    def find_all(self, locator: Locator) -> list["ElementHandle"]: ...


class BrowserDriver(Protocol):
    # -------- lookup --------
    def find_all(self, locator: Locator) -> list[ElementHandle]: ...

    # -------- navigation & scripting --------
    def navigate(self, url: str) -> None: ...
    def execute_script(self, script: str, *args: Any) -> Any: ...
    @property
    def title(self) -> str: ...

    # -------- utilities --------
    def screenshot_png(self) -> bytes: ...
    def quit(self) -> None: ...


@runtime_checkable
class RemoteDownloads(Protocol):
    """Server-side managed downloads of a remote (Grid) session."""

    def list_downloadable_names(self) -> list[str]: ...

    def fetch(self, name: str, destination_dir: Path) -> None:
        """Copy `name` into `destination_dir`; raises FileExistsError if already there."""
        ...

    def clear_downloadable_files(self) -> None: ...
