# browser_qa/reporting/writer.py
"""
Writers to persist a RunReport as JSON and CSV.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Tuple

from .schemas import RunReport


def write_report(report: RunReport, out_dir: Path) -> Tuple[Path, Path]:
    """
    Write a RunReport into out_dir as JSON and CSV.
    Returns (json_path, csv_path).
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / "report.json"
    csv_path = out_dir / "report.csv"

    json_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    # CSV: one row per step, attachments listed against the step they followed
    attached: dict[int | None, list[str]] = {}
    for a in report.attachments:
        attached.setdefault(a.step_index, []).append(a.path)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["run", "status", "step", "at", "message", "attachments"])
        for step in report.steps:
            writer.writerow(
                [
                    report.name,
                    report.status,
                    step.index,
                    step.at.isoformat(),
                    step.message,
                    ";".join(attached.get(step.index, [])),
                ]
            )
        if report.error:
            writer.writerow([report.name, report.status, "", "", f"ERROR: {report.error}", ""])

    return json_path, csv_path
