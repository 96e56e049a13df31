"""
Reporting data models for a recorded test run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, List
from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StepRecord(BaseModel):
    """One logged step (action, wait, verification) in a run."""

    index: int
    message: str
    at: datetime = Field(default_factory=_now)


class AttachmentRecord(BaseModel):
    """Evidence written next to the report (screenshot, text, downloaded file copy)."""

    name: str
    mime_type: str
    path: str
    size: int
    step_index: Optional[int] = None


class RunReport(BaseModel):
    """Everything recorded for one test run."""

    name: str
    status: Literal["running", "passed", "failed", "skipped"] = "running"
    started_at: datetime = Field(default_factory=_now)
    finished_at: Optional[datetime] = None
    error: Optional[str] = None
    steps: List[StepRecord] = Field(default_factory=list)
    attachments: List[AttachmentRecord] = Field(default_factory=list)
