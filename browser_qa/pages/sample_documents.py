"""
Page object for a "Sample Documents" listing with downloadable files.

The download flow is sequenced by the caller: the detector is prepared
before the click and awaited after it. The page never infers completion
from the click itself.
"""

from __future__ import annotations

from typing import Optional

from ..core.locator import Locator
from ..core.page import PageObject
from ..core.session import Session
from ..downloads.detector import CompletedFile, DownloadDetector


class SampleDocumentsPage(PageObject):
    HEADER = Locator.xpath("//h1[text()='Sample Documents']")
    NEWSLETTER_PDF = Locator.xpath("//div[@id='newsletter']//a[text()='PDF']")

    def __init__(
        self,
        session: Session,
        timeout: Optional[float] = None,
        detector: Optional[DownloadDetector] = None,
    ) -> None:
        super().__init__(session, timeout)
        self.detector = detector or DownloadDetector.from_session(session)

    def download_newsletter_pdf(self) -> CompletedFile:
        self.session.log_step("[VERIFY] Confirming 'Sample Documents' header is visible.")
        self.wait_for_visibility(self.HEADER)

        self.detector.prepare()

        self.session.log_step("[ACTION] Clicking Newsletter PDF link to start download.")
        self.click(self.NEWSLETTER_PDF)

        self.session.log_step("[WAIT] Waiting for downloaded PDF file to appear.")
        return self.detector.await_completion(pattern="*.pdf")
