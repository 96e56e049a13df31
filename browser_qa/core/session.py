"""
Explicit per-test browser session.

A Session owns one driver for the lifetime of one test and is passed to
every page object and helper at construction. Sessions are never shared
between concurrently running tests.
"""
# @file purpose: Bundle driver, settings, evidence sink and clock for one test.

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from ..io.driver import BrowserDriver, RemoteDownloads
from ..reporting.recorder import EvidenceRecorder
from .errors import BrowserSetupError
from .settings import Settings, default_worker_id, resolve_download_dir

logger = logging.getLogger(__name__)


@dataclass
class Session:
    driver: BrowserDriver
    settings: Settings
    recorder: Optional[EvidenceRecorder] = None
    worker_id: Optional[str] = None
    remote: Optional[RemoteDownloads] = None
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    _download_dir: Optional[Path] = field(default=None, repr=False)

    @classmethod
    def open(
        cls,
        settings: Settings,
        *,
        recorder: Optional[EvidenceRecorder] = None,
        worker_id: Optional[str] = None,
    ) -> "Session":
        """Provision the configured backend and wrap it in a Session."""
        worker = worker_id or (default_worker_id() if settings.remote else None)
        download_dir = resolve_download_dir(settings, worker)
        sleep: Callable[[float], None] = time.sleep
        if settings.backend == "playwright":
            if settings.remote:
                raise BrowserSetupError("The playwright backend only drives local browsers")
            from ..io.playwright_driver import PlaywrightDriver  # lazy: optional backend

            pw = PlaywrightDriver.launch(settings, download_dir)
            driver: BrowserDriver = pw
            remote = None
            sleep = pw.pause
        else:
            from ..io.selenium_driver import create_driver

            sd = create_driver(settings, download_dir)
            driver = sd
            remote = sd if settings.remote else None
        session = cls(
            driver=driver,
            settings=settings,
            recorder=recorder,
            worker_id=worker,
            remote=remote,
            sleep=sleep,
            _download_dir=download_dir,
        )
        session.attach_text("Global Configuration", settings.describe())
        return session

    @property
    def download_dir(self) -> Path:
        if self._download_dir is None:
            self._download_dir = resolve_download_dir(self.settings, self.worker_id)
        return self._download_dir

    # -------- reporting passthrough --------

    def log_step(self, message: str) -> None:
        if self.recorder is not None:
            self.recorder.log_step(message)
        else:
            logger.info(message)

    def attach_text(self, name: str, content: str) -> None:
        if self.recorder is not None:
            self.recorder.attach_text(name, content)

    def capture_screenshot(self, name: str = "screenshot.png") -> None:
        """Best-effort PNG evidence; never raises."""
        if self.recorder is None:
            return
        try:
            data = self.driver.screenshot_png()
        except Exception as e:  # noqa: BLE001
            logger.warning("Screenshot attach failed: %s", e)
            return
        self.recorder.attach(name, data, "image/png")

    # -------- browser --------

    def navigate(self, url: str) -> None:
        self.log_step(f"[NAVIGATE] Opening: {url}")
        self.driver.navigate(url)

    def close(self) -> None:
        """Quit the browser; safe to call more than once."""
        try:
            self.driver.quit()
        except Exception as e:  # noqa: BLE001
            logger.debug("Driver quit failed: %s", e)
