import os
from pathlib import Path

import pytest

from browser_qa.core.errors import DownloadPrepareError, DownloadTimeoutError
from browser_qa.core.session import Session
from browser_qa.downloads.candidates import Topology
from browser_qa.downloads.detector import DownloadDetector
from fakes import FakeClock


@pytest.fixture
def dl_dir(tmp_path: Path) -> Path:
    d = tmp_path / "dl"
    d.mkdir()
    return d


def _detector(dl_dir: Path, clock: FakeClock, **kw) -> DownloadDetector:
    kw.setdefault("timeout", 3.0)
    kw.setdefault("poll_interval", 0.25)
    return DownloadDetector(Topology.LOCAL, dl_dir, clock=clock, sleep=clock.sleep, **kw)


def test_file_written_in_one_shot_returns_on_second_poll(dl_dir: Path, clock: FakeClock) -> None:
    clock.at(1.0, lambda: (dl_dir / "x.pdf").write_bytes(b"x" * 50_000))

    done = _detector(dl_dir, clock).await_completion()

    assert done.name == "x.pdf"
    assert done.size == 50_000
    assert done.path == dl_dir / "x.pdf"
    assert done.topology is Topology.LOCAL
    assert clock.now == 1.25


def test_growing_file_returns_on_third_poll_never_second(dl_dir: Path, clock: FakeClock) -> None:
    target = dl_dir / "report.pdf"
    target.write_bytes(b"")
    clock.at(0.25, lambda: target.write_bytes(b"x" * 100))

    done = _detector(dl_dir, clock).await_completion("report.pdf")

    # polls at 0.0 (0 bytes), 0.25 (100), 0.5 (100)
    assert clock.now == 0.5
    assert done.size == 100


def test_zero_size_is_never_stable(dl_dir: Path, clock: FakeClock) -> None:
    (dl_dir / "empty.pdf").write_bytes(b"")
    with pytest.raises(DownloadTimeoutError):
        _detector(dl_dir, clock).await_completion()


def test_partial_marker_disqualifies_even_when_stable(dl_dir: Path, clock: FakeClock) -> None:
    (dl_dir / "report.crdownload").write_bytes(b"x" * 10)
    (dl_dir / ".com.google.Chrome.abc").write_bytes(b"x" * 10)

    with pytest.raises(DownloadTimeoutError) as exc:
        _detector(dl_dir, clock).await_completion()

    assert clock.now == 3.0
    assert "topology=local" in str(exc.value)


def test_partial_renamed_to_final_name(dl_dir: Path, clock: FakeClock) -> None:
    part = dl_dir / "doc.pdf.crdownload"
    part.write_bytes(b"x" * 10)
    clock.at(0.5, lambda: part.rename(dl_dir / "doc.pdf"))

    done = _detector(dl_dir, clock).await_completion(pattern="*.pdf")

    assert done.name == "doc.pdf"
    assert clock.now == 0.75


def test_expected_name_is_matched_case_insensitively(dl_dir: Path, clock: FakeClock) -> None:
    (dl_dir / "Other.txt").write_bytes(b"x" * 5)
    (dl_dir / "Invoice.PDF").write_bytes(b"x" * 5)

    done = _detector(dl_dir, clock).await_completion(expected_name="invoice.pdf")

    assert done.name == "Invoice.PDF"


def test_predicate_selector(dl_dir: Path, clock: FakeClock) -> None:
    (dl_dir / "a.csv").write_bytes(b"1")
    (dl_dir / "b.pdf").write_bytes(b"1")

    done = _detector(dl_dir, clock).await_completion(predicate=lambda n: n.endswith(".csv"))

    assert done.name == "a.csv"


def test_latest_candidate_wins_without_selector(dl_dir: Path, clock: FakeClock) -> None:
    old, new = dl_dir / "old.pdf", dl_dir / "new.pdf"
    old.write_bytes(b"1")
    new.write_bytes(b"1")
    os.utime(old, (1_000, 1_000))
    os.utime(new, (2_000, 2_000))

    assert _detector(dl_dir, clock).await_completion().name == "new.pdf"


def test_chosen_candidate_stays_pinned_while_a_newer_file_appears(
    dl_dir: Path, clock: FakeClock
) -> None:
    first = dl_dir / "first.pdf"
    first.write_bytes(b"1")
    os.utime(first, (1_000, 1_000))

    def newer() -> None:
        second = dl_dir / "second.pdf"
        second.write_bytes(b"22")
        os.utime(second, (2_000, 2_000))

    clock.at(0.25, newer)

    done = _detector(dl_dir, clock).await_completion()

    assert done.name == "first.pdf"
    assert clock.now == 0.25


def test_poll_errors_are_absorbed(
    dl_dir: Path, clock: FakeClock, monkeypatch: pytest.MonkeyPatch
) -> None:
    import browser_qa.downloads.detector as detector_mod

    calls = {"n": 0}
    real = detector_mod.list_directory

    def flaky(directory: Path):
        calls["n"] += 1
        if calls["n"] == 1:
            raise OSError("transient")
        return real(directory)

    monkeypatch.setattr(detector_mod, "list_directory", flaky)
    (dl_dir / "x.pdf").write_bytes(b"abc")

    done = _detector(dl_dir, clock).await_completion()

    assert done.name == "x.pdf"
    assert clock.now == 0.5


def test_prepare_creates_and_empties_directory(tmp_path: Path, clock: FakeClock) -> None:
    target = tmp_path / "fresh" / "w1"
    _detector(target, clock).prepare()
    assert target.is_dir()

    (target / "leftover.pdf").write_bytes(b"old")
    (target / "keep-subdir").mkdir()
    _detector(target, clock).prepare()

    assert [p.name for p in target.iterdir()] == ["keep-subdir"]


def test_prepare_fails_when_directory_cannot_be_created(tmp_path: Path, clock: FakeClock) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("not a dir")

    with pytest.raises(DownloadPrepareError):
        _detector(blocker / "sub", clock).prepare()


def test_from_session_uses_settings_and_worker_namespace(make_session, tmp_path: Path) -> None:
    session: Session = make_session(download_timeout_seconds=9, download_poll_seconds=0.1)
    session.worker_id = "gw1"

    det = DownloadDetector.from_session(session)

    assert det.topology is Topology.LOCAL
    assert det.download_dir == tmp_path / "downloads" / "gw1"
    assert det.timeout == 9
    assert det.poll_interval == 0.1


def test_remote_managed_requires_capability(dl_dir: Path) -> None:
    with pytest.raises(ValueError):
        DownloadDetector(Topology.REMOTE_MANAGED, dl_dir)
