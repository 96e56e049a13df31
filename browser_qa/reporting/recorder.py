"""
Evidence recorder: the reporting sink behind page objects and runners.

Fire-and-forget: every method logs and swallows its own failures, because
evidence capture must never change the outcome of the step it documents.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from .schemas import AttachmentRecord, RunReport, StepRecord
from .writer import write_report

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "text/plain": "txt",
    "text/html": "html",
    "application/json": "json",
    "application/pdf": "pdf",
}

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(name: str) -> str:
    return _UNSAFE.sub("-", name).strip("-") or "attachment"


class EvidenceRecorder:
    """
    Collects steps and attachments for one run and writes them under
    `<out_dir>/<run_name>/` (attachments) plus report.json / report.csv.
    """

    def __init__(self, out_dir: Path, run_name: str = "run") -> None:
        self.run_dir = out_dir / _safe_name(run_name)
        self.report = RunReport(name=run_name)

    # -------- sink --------

    def log_step(self, message: str) -> None:
        logger.info(message)
        self.report.steps.append(StepRecord(index=len(self.report.steps) + 1, message=message))

    def attach(self, name: str, data: bytes, mime_type: str) -> None:
        if not data:
            return
        ext = _EXTENSIONS.get(mime_type, "bin")
        stem = _safe_name(name)
        filename = stem if stem.lower().endswith(f".{ext}") else f"{stem}.{ext}"
        path = self.run_dir / f"{len(self.report.attachments) + 1:02d}-{filename}"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.warning("Attachment %r failed: %s", name, e)
            return
        self.report.attachments.append(
            AttachmentRecord(
                name=name,
                mime_type=mime_type,
                path=str(path),
                size=len(data),
                step_index=len(self.report.steps) or None,
            )
        )

    def attach_text(self, name: str, content: str) -> None:
        self.attach(name, (content or "").encode("utf-8"), "text/plain")

    # -------- lifecycle --------

    def finish(self, status: str, error: Optional[str] = None) -> Optional[Tuple[Path, Path]]:
        """Close the run and write its report; returns (json_path, csv_path) or None on failure."""
        self.report.status = status  # type: ignore[assignment]
        self.report.error = error
        self.report.finished_at = datetime.now(timezone.utc)
        try:
            return write_report(self.report, self.run_dir)
        except OSError as e:
            logger.warning("Report write failed: %s", e)
            return None
