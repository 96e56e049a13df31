"""
Structured action return value reported to the runner / CLI.
"""
# @file purpose: Define ActionResult model for action outputs.

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """
    Uniform action result:
    - ok: whether the action succeeded
    - extracted_content: text produced by the step (extract_text, exists, await_download)
    - meta: diagnostics (locator, url, file path, size ...) for logs and reports
    """

    ok: bool = True
    extracted_content: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, **meta: Any) -> "ActionResult":
        return cls(ok=True, meta=meta)

    @classmethod
    def failure(cls, **meta: Any) -> "ActionResult":
        return cls(ok=False, meta=meta)
