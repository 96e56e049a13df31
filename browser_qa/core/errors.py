"""
Project-wide error taxonomy.

- BrowserQAError: base class for every custom error
- ActionExecutionError: a scripted action failed (wraps the root cause)
- TimeoutError: project timeout base (kept apart from the builtin TimeoutError)
  - ElementTimeoutError: no element satisfied a readiness predicate in time
  - DownloadTimeoutError: no download became stable in time
- StaleElementError / ElementNotInteractableError: transient element states,
  absorbed by the wait loops and never surfaced by waiting operations
"""
# @file purpose: Define error taxonomy for browser-qa.

from __future__ import annotations

from typing import Any


class BrowserQAError(Exception):
    """Base class for all custom errors in browser-qa."""


class ActionExecutionError(BrowserQAError):
    """
    Raised when a scripted action fails to execute.
    Carries enough context for the CLI/runner to print a consistent diagnosis.
    """

    def __init__(
        self,
        action: str,
        message: str,
        *,
        selector: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.action: str = action
        self.selector: str | None = selector
        self.url: str | None = url
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        parts = [f"[{self.action}] {super().__str__()}"]
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        if self.cause is not None:
            parts.append(f"cause={self.cause}")
        return " | ".join(parts)


class TimeoutError(BrowserQAError):
    """Raised on operation timeout within the framework."""


class ElementTimeoutError(TimeoutError):
    """No element matching a locator satisfied the readiness predicate before the deadline."""

    def __init__(self, locator: str, readiness: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:g}s waiting for {locator} to be {readiness}")
        self.locator = locator
        self.readiness = readiness
        self.timeout = timeout


class DownloadTimeoutError(TimeoutError):
    """No download candidate became stable before the deadline."""

    def __init__(self, topology: str, selector: str, timeout: float) -> None:
        super().__init__(
            f"File was not fully downloaded and stable within {timeout:g}s "
            f"(topology={topology}, selector={selector})"
        )
        self.topology = topology
        self.selector = selector
        self.timeout = timeout


class DownloadPrepareError(BrowserQAError):
    """The local download destination could not be created or emptied."""


class BrowserSetupError(BrowserQAError):
    """Browser/session provisioning failed."""


class ElementNotFoundError(BrowserQAError):
    """An immediate (non-waiting) lookup found no element."""


class UnexpectedTagError(BrowserQAError):
    """An element had the wrong tag for the requested operation (e.g. select on a <div>)."""


class StaleElementError(BrowserQAError):
    """The handle no longer refers to a live DOM node."""


class ElementNotInteractableError(BrowserQAError):
    """The element exists but cannot receive the interaction yet."""


# Conditions the wait loops treat as "not ready yet" rather than failures.
TRANSIENT_ELEMENT_ERRORS: tuple[type[BaseException], ...] = (
    StaleElementError,
    ElementNotInteractableError,
)
