from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from browser_qa.core import registry
from browser_qa.core.session import Session
from browser_qa.core.settings import CONFIG_FILE_ENV, Settings, get_settings
from browser_qa.reporting.recorder import EvidenceRecorder
from fakes import FakeClock, FakeDriver


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep BQA_* variables and a stray config.properties out of every test."""
    for key in list(os.environ):
        if key.startswith("BQA_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv(CONFIG_FILE_ENV, str(tmp_path / "absent.properties"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def recorder(tmp_path: Path) -> EvidenceRecorder:
    return EvidenceRecorder(tmp_path / "artifacts", run_name="unit")


@pytest.fixture
def make_session(
    driver: FakeDriver, clock: FakeClock, recorder: EvidenceRecorder, tmp_path: Path
) -> Callable[..., Session]:
    def _make(**overrides: object) -> Session:
        values: dict[str, object] = {
            "wait_timeout_seconds": 2.0,
            "wait_poll_seconds": 0.5,
            "download_timeout_seconds": 3.0,
            "download_poll_seconds": 0.25,
            "download_dir": tmp_path / "downloads",
        }
        values.update(overrides)
        return Session(
            driver=driver,
            settings=Settings(**values),
            recorder=recorder,
            clock=clock,
            sleep=clock.sleep,
        )

    return _make


@pytest.fixture
def session(make_session: Callable[..., Session]) -> Session:
    return make_session()


@pytest.fixture
def fresh_registry():
    """Registry state restored after a test that registers its own actions."""
    saved = registry.snapshot()
    registry.restore({})
    yield
    registry.restore(saved)
