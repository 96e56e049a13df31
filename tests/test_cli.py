import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from browser_qa.cli import main as cli
from browser_qa.core.locator import Locator
from browser_qa.core.session import Session
from browser_qa.core.settings import Settings
from browser_qa.reporting.recorder import EvidenceRecorder
from fakes import FakeDriver, FakeElement

runner = CliRunner()


def _script(tmp_path: Path, steps: list) -> Path:
    path = tmp_path / "flow.json"
    path.write_text(json.dumps(steps), encoding="utf-8")
    return path


def test_doctor_prints_effective_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BQA_BROWSER", "firefox")
    result = runner.invoke(cli.app, ["doctor"])
    assert result.exit_code == 0
    assert "firefox" in result.output
    assert "local" in result.output
    assert "await_download" in result.output
    assert "Empty the download destination" in result.output


def test_validate_ok(tmp_path: Path) -> None:
    script = _script(
        tmp_path,
        [
            {"name": "open_url", "args": {"url": "https://demo.guru99.com/test/newtours/"}},
            {"name": "type", "args": {"locator": "name=userName", "text": "tutorial"}},
            {"name": "exists", "args": {"locator": "xpath=//span", "expect": False}},
        ],
    )
    result = runner.invoke(cli.app, ["validate", str(script)])
    assert result.exit_code == 0
    assert "all specs passed" in result.output


def test_validate_reports_unknown_and_invalid(tmp_path: Path) -> None:
    script = _script(
        tmp_path,
        [{"name": "teleport", "args": {}}, {"name": "click", "args": {}}],
    )
    result = runner.invoke(cli.app, ["validate", str(script)])
    assert result.exit_code == 1
    assert "Registered" in result.output
    assert "Invalid" in result.output


def test_missing_or_malformed_script(tmp_path: Path) -> None:
    assert runner.invoke(cli.app, ["validate", str(tmp_path / "nope.json")]).exit_code == 2
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert runner.invoke(cli.app, ["validate", str(bad)]).exit_code == 2


def test_run_stops_at_failure_and_writes_report(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    driver = FakeDriver()
    driver.put(Locator.name("userName"), FakeElement())

    def fake_open(settings: Settings, *, recorder: EvidenceRecorder, worker_id=None) -> Session:
        fast = Settings.model_validate(
            {**settings.model_dump(), "wait_timeout_seconds": 0.01, "wait_poll_seconds": 0.01}
        )
        return Session(driver=driver, settings=fast, recorder=recorder)

    monkeypatch.setattr(cli.Session, "open", MagicMock(side_effect=fake_open))
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    script = _script(
        tmp_path,
        [
            {"name": "type", "args": {"locator": "name=userName", "text": "tutorial"}},
            {"name": "click", "args": {"locator": "name=submit"}},
            {"name": "snapshot", "args": {}},
        ],
    )

    result = runner.invoke(
        cli.app, ["run", str(script), "--artifacts-dir", str(tmp_path / "out"), "--no-headless"]
    )

    assert result.exit_code == 1
    assert "SKIPPED" in result.output
    assert driver.quit_called
    report = json.loads((tmp_path / "out" / "flow" / "report.json").read_text(encoding="utf-8"))
    assert report["status"] == "failed"
    assert "name=submit" not in report["error"]
    assert "By.name: submit" in report["error"]
    assert any(a["name"] == "fail-02-click.png" for a in report["attachments"])
    opened_with: Settings = cli.Session.open.call_args.args[0]
    assert opened_with.headless is False


def test_run_rejects_unknown_backend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    script = _script(tmp_path, [{"name": "snapshot", "args": {}}])
    result = runner.invoke(cli.app, ["run", str(script), "--backend", "lynx"])
    assert result.exit_code == 2
