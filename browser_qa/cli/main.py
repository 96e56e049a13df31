"""
CLI entrypoint.

doctor: print the effective configuration.
validate: offline script check against the action registry.
run: execute a script in a real browser and write the evidence report.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from ..actions.runtime import ScriptRuntime
from ..core import registry
from ..core.action import ActionSpec
from ..core.controller.runner import Runner, StepOutcome
from ..core.errors import BrowserQAError
from ..core.logger import setup_logging
from ..core.session import Session
from ..core.settings import Settings, get_settings
from ..reporting.recorder import EvidenceRecorder

app = typer.Typer(help="browser-qa CLI")
console = Console()


def _load_specs(script: Path, cmd: str) -> list[ActionSpec]:
    if not script.exists():
        typer.secho(f"[{cmd}] file not found: {script}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    try:
        data = json.loads(script.read_text(encoding="utf-8"))
        specs = TypeAdapter(list[ActionSpec]).validate_python(data)
    except json.JSONDecodeError as je:
        typer.secho(f"[{cmd}] not valid JSON: {je}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    except ValidationError as ve:
        typer.secho(f"[{cmd}] invalid file format for ActionSpec[]", fg=typer.colors.RED)
        console.print(ve)
        raise typer.Exit(code=2)

    # Import action implementations to trigger registration
    try:
        import browser_qa.actions.impl  # noqa: F401
    except Exception as e:  # noqa: BLE001
        typer.secho(f"[{cmd}] failed to import actions: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    return specs


def _results_table(title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")
    return table


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings and the registered script steps."""
    s = get_settings()
    console.print("[bold green]browser-qa[/] environment")
    console.print(f"- browser:  {s.browser} ({s.backend}, headless={s.headless})")
    console.print(f"- remote:   {s.remote} {s.grid_url if s.remote else ''}".rstrip())
    console.print(f"- waits:    {s.wait_timeout_seconds:g}s (poll {s.wait_poll_seconds:g}s)")
    console.print(
        f"- download: {s.topology}, {s.download_timeout_seconds:g}s "
        f"(poll {s.download_poll_seconds:g}s) -> {s.download_dir}"
    )
    console.print(f"- artifacts: {s.artifacts_dir}")

    import browser_qa.actions.impl  # noqa: F401

    console.print("- steps:")
    for entry in registry.registered():
        console.print(f"    {entry.name:<16} {entry.summary}", highlight=False)


@app.command("validate")
def validate(script: Path = typer.Argument(..., help="Path to JSON file of ActionSpec[]")) -> None:
    """
    Offline spec validation: read JSON array [{name, args}] and validate each item
    against the params model bound in the registry. Print a table result and exit
    non-zero if any failures.
    """
    specs = _load_specs(script, "validate")
    table = _results_table("Validation Results")

    failures = 0
    for i, spec in enumerate(specs, start=1):
        try:
            registry.validate_spec(spec)
            table.add_row(str(i), spec.name, "[green]OK[/]", "-")
        except KeyError as ke:
            failures += 1
            table.add_row(str(i), spec.name, "[red]Not Registered[/]", str(ke))
        except ValidationError as ve:
            failures += 1
            msg = ve.errors()[0].get("msg", "invalid args")
            table.add_row(str(i), spec.name, "[red]Invalid Args[/]", msg)

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[validate] all specs passed", fg=typer.colors.GREEN)


@app.command("run")
def run(
    script: Path = typer.Argument(..., help="Path to JSON file of ActionSpec[]"),
    backend: Optional[str] = typer.Option(None, "--backend", help="selenium | playwright"),
    browser: Optional[str] = typer.Option(None, "--browser", help="chrome | firefox | edge"),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Run browser headless"
    ),
    remote: Optional[bool] = typer.Option(None, "--remote/--local", help="Use Selenium Grid"),
    artifacts_dir: Optional[Path] = typer.Option(
        None, "--artifacts-dir", help="Where to save the report and screenshots"
    ),
) -> None:
    """
    Execute a list of actions: read JSON -> structure check -> param check -> run in browser.
    Stops at the first failing step. Prints a table of results; returns non-zero on failure.
    """
    setup_logging()
    specs = _load_specs(script, "run")

    overrides: dict[str, Any] = {
        k: v
        for k, v in {
            "backend": backend,
            "browser": browser,
            "headless": headless,
            "remote": remote,
            "artifacts_dir": artifacts_dir,
        }.items()
        if v is not None
    }
    try:
        settings = Settings.model_validate({**get_settings().model_dump(), **overrides})
    except ValidationError as ve:
        typer.secho("[run] invalid option", fg=typer.colors.RED)
        console.print(ve)
        raise typer.Exit(code=2)

    recorder = EvidenceRecorder(settings.artifacts_dir, run_name=script.stem)
    try:
        session = Session.open(settings, recorder=recorder)
    except BrowserQAError as e:
        recorder.finish("failed", str(e))
        typer.secho(f"[run] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    try:
        rows: list[StepOutcome] = Runner().run(ScriptRuntime(session), specs)
    finally:
        session.close()

    table = _results_table("Run Results")
    failed = next((r for r in rows if not r.ok), None)
    for r in rows:
        result = "[green]OK[/]" if r.ok else "[red]FAIL[/]"
        table.add_row(str(r.index), r.name, result, r.detail)
    for j in range(len(rows) + 1, len(specs) + 1):
        table.add_row(str(j), specs[j - 1].name, "[dim]SKIPPED[/]", "-")
    console.print(table)

    paths = recorder.finish("failed" if failed else "passed", failed.detail if failed else None)
    if paths:
        console.print(f"[bold green]Report written[/]: {paths[0]}  |  {paths[1]}")

    if failed:
        raise typer.Exit(code=1)
    typer.secho("[run] completed successfully", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
