"""
Explicit waits: readiness predicates, wait contracts and the polling loop.

All waiting is blocking polling on the calling thread. A wait ends either
with a value or, once the deadline passes, with a TimeoutError; it never
runs past the deadline and never returns an element that is not ready.
"""
# @file purpose: Resolve locators to actionable elements under a bounded timeout.

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from .errors import TRANSIENT_ELEMENT_ERRORS, ElementTimeoutError, TimeoutError
from .locator import Locator

if TYPE_CHECKING:
    from ..io.driver import BrowserDriver, ElementHandle
    from .settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Readiness(str, Enum):
    """Ordered by strictness: clickable implies visible implies exists."""

    EXISTS = "present"
    VISIBLE = "visible"
    CLICKABLE = "clickable"

    def holds(self, element: "ElementHandle") -> bool:
        if self is Readiness.EXISTS:
            return True
        if not element.is_displayed():
            return False
        if self is Readiness.VISIBLE:
            return True
        return element.is_enabled()


@dataclass(frozen=True)
class WaitContract:
    timeout: float
    poll_interval: float = 0.5

    def __post_init__(self) -> None:
        if self.timeout < 0:
            raise ValueError("timeout must be >= 0")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

    @classmethod
    def from_settings(cls, settings: "Settings", timeout: float | None = None) -> "WaitContract":
        return cls(
            timeout=settings.wait_timeout_seconds if timeout is None else timeout,
            poll_interval=settings.wait_poll_seconds,
        )


class Waiter:
    """
    Polls a condition until it returns a truthy value or the contract's
    timeout elapses. Transient element errors count as "not yet".
    """

    def __init__(
        self,
        contract: WaitContract,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        ignored: tuple[type[BaseException], ...] = TRANSIENT_ELEMENT_ERRORS,
    ) -> None:
        self.contract = contract
        self.clock = clock
        self.sleep = sleep
        self.ignored = ignored

    def until(
        self,
        condition: Callable[[], Optional[T]],
        describe: str,
        *,
        on_timeout: Callable[[], Exception] | None = None,
    ) -> T:
        deadline = self.clock() + self.contract.timeout
        last_error: BaseException | None = None
        while True:
            try:
                value = condition()
                if value:
                    return value
            except self.ignored as e:
                last_error = e
            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            self.sleep(min(self.contract.poll_interval, remaining))

        err = on_timeout() if on_timeout else TimeoutError(
            f"Timed out after {self.contract.timeout:g}s waiting for {describe}"
        )
        raise err from last_error


def first_ready(
    driver: "BrowserDriver", locator: Locator, readiness: Readiness
) -> "ElementHandle | None":
    """One poll: the first element matching `locator` that satisfies `readiness`, if any."""
    for element in driver.find_all(locator):
        if readiness.holds(element):
            return element
    return None


def await_ready(
    driver: "BrowserDriver",
    locator: Locator,
    readiness: Readiness,
    waiter: Waiter,
) -> "ElementHandle":
    """Resolve `locator` to a fresh element satisfying `readiness`, or raise ElementTimeoutError."""
    return waiter.until(
        lambda: first_ready(driver, locator, readiness),
        f"{locator} to be {readiness.value}",
        on_timeout=lambda: ElementTimeoutError(
            str(locator), readiness.value, waiter.contract.timeout
        ),
    )
