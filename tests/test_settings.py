from pathlib import Path

import pytest

from browser_qa.core.settings import (
    CONFIG_FILE_ENV,
    DEFAULT_DOWNLOAD_TIMEOUT_SECONDS,
    DEFAULT_PARTIAL_SUFFIXES,
    DEFAULT_WAIT_TIMEOUT_SECONDS,
    Settings,
    get_settings,
    reload_settings,
    resolve_download_dir,
)


def test_defaults() -> None:
    s = Settings()
    assert s.wait_timeout_seconds == DEFAULT_WAIT_TIMEOUT_SECONDS == 20.0
    assert s.download_timeout_seconds == DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    assert s.partial_download_suffixes == DEFAULT_PARTIAL_SUFFIXES
    assert s.topology == "local"


def test_properties_file_is_lowest_precedence(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    props = tmp_path / "config.properties"
    props.write_text(
        "# comment\n"
        "browser=firefox\n"
        "wait.timeout.seconds=7\n"
        "remote=true\n"
        "grid.url=http://grid:4444/\n"
        "unknown.key=ignored\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_FILE_ENV, str(props))
    monkeypatch.setenv("BQA_BROWSER", "edge")

    s = Settings()

    assert s.browser == "edge"
    assert s.wait_timeout_seconds == 7
    assert s.remote is True
    assert s.grid_url == "http://grid:4444/"
    assert s.topology == "remote_managed"


@pytest.mark.parametrize("raw", ["abc", "-5", "0", ""])
def test_malformed_timeouts_fall_back_to_defaults(
    raw: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("BQA_WAIT_TIMEOUT_SECONDS", raw)
    monkeypatch.setenv("BQA_DOWNLOAD_TIMEOUT_SECONDS", raw)

    s = Settings()

    assert s.wait_timeout_seconds == 20.0
    assert s.download_timeout_seconds == 45.0


def test_suffixes_from_comma_separated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BQA_PARTIAL_DOWNLOAD_SUFFIXES", ".crdownload, .inprogress")
    assert Settings().partial_download_suffixes == (".crdownload", ".inprogress")


def test_explicit_topology_wins() -> None:
    assert Settings(remote=True, download_topology="remote_mounted").topology == "remote_mounted"


def test_get_with_call_site_default() -> None:
    s = Settings(headless=False)
    assert s.get("headless") == "false"
    assert s.get("wait.timeout.seconds") == "20.0"
    assert s.get("remote.download.dir", "/tmp/x") == "/tmp/x"
    assert s.get("no.such.key", "fallback") == "fallback"
    assert s.get("partial_download_suffixes").startswith(".crdownload,")


def test_get_only_resolves_settings_keys() -> None:
    s = Settings(remote=True)
    assert s.get("describe", "fallback") == "fallback"
    assert s.get("model_dump") == ""
    assert s.get("download.topology") == ""
    assert s.get("topology") == "remote_managed"


def test_snapshot_is_immutable_and_reload_builds_a_new_one(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    first = get_settings()
    assert get_settings() is first
    with pytest.raises(Exception):
        first.browser = "firefox"  # type: ignore[misc]

    monkeypatch.setenv("BQA_BROWSER", "firefox")
    second = reload_settings()

    assert second is not first
    assert first.browser == "chrome"
    assert second.browser == "firefox"


def test_download_dir_is_absolute_and_namespaced(tmp_path: Path) -> None:
    s = Settings(download_dir=Path("downloads"))
    assert resolve_download_dir(s) == tmp_path / "downloads"
    assert resolve_download_dir(s, "gw3") == tmp_path / "downloads" / "gw3"
