"""In-memory stand-ins for the driver protocols plus a manually advanced clock."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from browser_qa.core.errors import StaleElementError
from browser_qa.core.locator import Locator


class FakeClock:
    """
    Monotonic clock whose time only moves inside sleep(). Callbacks scheduled
    with at() fire as soon as a sleep reaches their time.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []
        self._events: list[tuple[float, Callable[[], None]]] = []

    def __call__(self) -> float:
        return self.now

    def at(self, when: float, fn: Callable[[], None]) -> None:
        self._events.append((when, fn))
        self._events.sort(key=lambda e: e[0])

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        while self._events and self._events[0][0] <= self.now:
            _, fn = self._events.pop(0)
            fn()


@dataclass
class FakeElement:
    text: str = ""
    tag_name_value: str = "div"
    displayed: bool = True
    enabled: bool = True
    attributes: dict[str, str] = field(default_factory=dict)
    children: dict[Locator, list["FakeElement"]] = field(default_factory=dict)
    stale: bool = False

    clicks: int = 0
    typed: list[str] = field(default_factory=list)
    cleared: int = 0
    selected: list[tuple[str, Any]] = field(default_factory=list)

    def _check(self) -> None:
        if self.stale:
            raise StaleElementError("element is no longer attached to the DOM")

    @property
    def tag_name(self) -> str:
        self._check()
        return self.tag_name_value

    def is_displayed(self) -> bool:
        self._check()
        return self.displayed

    def is_enabled(self) -> bool:
        self._check()
        return self.enabled

    def get_attribute(self, name: str) -> Optional[str]:
        self._check()
        return self.attributes.get(name)

    def click(self) -> None:
        self._check()
        self.clicks += 1

    def clear(self) -> None:
        self._check()
        self.cleared += 1
        self.typed.clear()

    def send_keys(self, text: str) -> None:
        self._check()
        self.typed.append(text)

    def select(self, by: str, key: Any) -> None:
        self._check()
        self.selected.append((by, key))

    def find_all(self, locator: Locator) -> list["FakeElement"]:
        self._check()
        return list(self.children.get(locator, []))


class FakeDriver:
    def __init__(self, title: str = "Fake Page") -> None:
        self.elements: dict[Locator, list[FakeElement]] = {}
        self.visited: list[str] = []
        self.scripts: list[tuple[str, tuple[Any, ...]]] = []
        self.lookups = 0
        self.quit_called = False
        self.screenshot_error: Optional[Exception] = None
        self._title = title

    def put(self, locator: Locator, *elements: FakeElement) -> None:
        self.elements[locator] = list(elements)

    def remove(self, locator: Locator) -> None:
        self.elements.pop(locator, None)

    def find_all(self, locator: Locator) -> list[FakeElement]:
        self.lookups += 1
        return list(self.elements.get(locator, []))

    def navigate(self, url: str) -> None:
        self.visited.append(url)

    def execute_script(self, script: str, *args: Any) -> Any:
        self.scripts.append((script, args))
        return None

    @property
    def title(self) -> str:
        return self._title

    def screenshot_png(self) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return b"\x89PNG\r\n\x1a\nfake"

    def quit(self) -> None:
        self.quit_called = True


class FakeRemote:
    """Managed-download manifest backed by a dict of name -> content."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.fetches: list[str] = []
        self.cleared = 0
        self.list_calls = 0
        self.clear_error: Optional[Exception] = None
        self.list_errors: list[Exception] = []
        self.fetch_error: Optional[Exception] = None

    def list_downloadable_names(self) -> list[str]:
        self.list_calls += 1
        if self.list_errors:
            raise self.list_errors.pop(0)
        return list(self.files)

    def fetch(self, name: str, destination_dir: Path) -> None:
        self.fetches.append(name)
        if self.fetch_error is not None:
            raise self.fetch_error
        target = destination_dir / name
        if target.exists():
            raise FileExistsError(str(target))
        destination_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.files[name])

    def clear_downloadable_files(self) -> None:
        if self.clear_error is not None:
            raise self.clear_error
        self.cleared += 1
        self.files.clear()
