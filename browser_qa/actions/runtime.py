"""
What a scripted action runs against: one Session, a generic page gateway
over it, and a download detector created on first use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from browser_qa.core.page import PageObject
from browser_qa.core.session import Session
from browser_qa.downloads.detector import DownloadDetector


class ScriptPage(PageObject):
    """Page object with no locators of its own; scripts pass them per step."""


@dataclass
class ScriptRuntime:
    session: Session
    page: ScriptPage = field(init=False)
    _downloads: Optional[DownloadDetector] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.page = ScriptPage(self.session)

    def page_with_timeout(self, timeout: Optional[float]) -> ScriptPage:
        if timeout is None:
            return self.page
        return ScriptPage(self.session, timeout=timeout)

    @property
    def downloads(self) -> DownloadDetector:
        if self._downloads is None:
            self._downloads = DownloadDetector.from_session(self.session)
        return self._downloads
