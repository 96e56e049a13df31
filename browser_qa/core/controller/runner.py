# browser_qa/core/controller/runner.py
"""
Minimal sequential runner for ActionSpec[].

Responsibilities:
- Validate each spec via registry
- Execute actions once, in order; no retries
- Stop at the first failing step
- On failure: attach a screenshot to the session's evidence
- Return per-step outcomes for CLI rendering and reporting
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .. import registry
from ..action import ActionSpec
from ..errors import ActionExecutionError

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    """UI-friendly outcome used by CLI and reporters."""

    index: int
    name: str
    ok: bool
    detail: str = "-"
    # Filled from ActionResult on success:
    extracted: str | None = None  # e.g., text extracted by extract_text
    meta: dict[str, Any] | None = None  # e.g., {"selector": "By.id: q"} or {"url": "..."}


def _detail(res: Any) -> str:
    text = getattr(res, "extracted_content", None)
    if text:
        return (text[:120] + "…") if len(text) > 120 else str(text)
    meta = getattr(res, "meta", None)
    if isinstance(meta, dict):
        if "url" in meta:
            return str(meta["url"])
        if "selector" in meta:
            return f'selector="{meta["selector"]}"'
    return "-"


class Runner:
    def run(self, rt: Any, specs: list[ActionSpec]) -> list[StepOutcome]:
        """
        Execute `specs` against runtime `rt`. The returned list ends at the
        first failed step; later steps are not attempted.
        """
        outcomes: list[StepOutcome] = []

        for i, spec in enumerate(specs, start=1):
            name = spec.name

            # 1) validate params
            try:
                entry, params = registry.validate_spec(spec)
            except (ValidationError, KeyError) as e:
                outcomes.append(StepOutcome(index=i, name=name, ok=False, detail=f"invalid spec: {e}"))
                self._on_failure(rt, i, name)
                break

            # 2) execute
            try:
                res = entry.fn(rt, params)
            except ActionExecutionError as e:
                logger.error("Step %d (%s) failed: %s", i, name, e)
                outcomes.append(StepOutcome(index=i, name=name, ok=False, detail=str(e)))
                self._on_failure(rt, i, name)
                break

            meta = res.meta if isinstance(getattr(res, "meta", None), dict) else None
            outcomes.append(
                StepOutcome(
                    index=i,
                    name=name,
                    ok=bool(res.ok),
                    detail=_detail(res),
                    extracted=getattr(res, "extracted_content", None),
                    meta=meta,
                )
            )
            if not res.ok:
                self._on_failure(rt, i, name)
                break

        return outcomes

    def _on_failure(self, rt: Any, index: int, name: str) -> None:
        """Best-effort failure evidence (screenshot)."""
        session = getattr(rt, "session", None)
        if session is not None:
            session.capture_screenshot(f"fail-{index:02d}-{name}.png")
