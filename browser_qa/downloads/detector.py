"""
Download completion detector.

Browsers expose no portable "download finished" event, locally or on a
Grid, so completion is inferred from what can be observed: directory
listings, file sizes and the remote session's managed-download manifest.

Topologies:
- LOCAL / REMOTE_MOUNTED: poll the destination directory directly.
- REMOTE_MANAGED: poll the session's manifest, fetch the chosen file into
  the destination once, then apply the same stability rule locally.

Usage (caller sequences it around the triggering click):
    detector = DownloadDetector.from_session(session)
    detector.prepare()
    page.click(PDF_LINK)
    done = detector.await_completion(pattern="*.pdf")
"""
# @file purpose: Wait for asynchronous downloads to finish across execution topologies.

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ..core.errors import DownloadPrepareError, DownloadTimeoutError
from ..core.settings import DEFAULT_PARTIAL_SUFFIXES
from ..io.driver import RemoteDownloads
from .candidates import (
    NameSelector,
    StabilityTracker,
    Topology,
    choose_local,
    choose_remote,
    list_directory,
)

if TYPE_CHECKING:
    from ..core.session import Session

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    LISTING = "listing"
    TRANSFERRING = "transferring"
    STABILITY_CHECK = "stability_check"
    DONE = "done"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class CompletedFile:
    path: Path
    name: str
    size: int
    topology: Topology


@dataclass
class _Poll:
    """Bookkeeping owned by one await_completion() call."""

    tracker: StabilityTracker = field(default_factory=StabilityTracker)
    pinned: Optional[str] = None
    fetched: set[str] = field(default_factory=set)
    phase: Phase = Phase.IDLE

    def enter(self, phase: Phase) -> None:
        if phase is not self.phase:
            logger.debug("download phase %s -> %s", self.phase.value, phase.value)
            self.phase = phase


class DownloadDetector:
    def __init__(
        self,
        topology: Topology | str,
        download_dir: Path,
        *,
        remote: Optional[RemoteDownloads] = None,
        timeout: float = 45.0,
        poll_interval: float = 0.25,
        partial_suffixes: Sequence[str] = DEFAULT_PARTIAL_SUFFIXES,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.topology = Topology(topology)
        if self.topology is Topology.REMOTE_MANAGED and remote is None:
            raise ValueError("remote_managed topology requires a RemoteDownloads capability")
        self.download_dir = Path(download_dir)
        self.remote = remote
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.partial_suffixes = tuple(partial_suffixes)
        self.clock = clock
        self.sleep = sleep

    @classmethod
    def from_session(cls, session: "Session") -> "DownloadDetector":
        s = session.settings
        return cls(
            s.topology,
            session.download_dir,
            remote=session.remote,
            timeout=s.download_timeout_seconds,
            poll_interval=s.download_poll_seconds,
            partial_suffixes=s.partial_download_suffixes,
            clock=session.clock,
            sleep=session.sleep,
        )

    # ------------------------------------------------------------------
    # prepare
    # ------------------------------------------------------------------

    def prepare(self) -> None:
        """
        Start from a clean state. Call BEFORE triggering the download.
        Clearing the remote manifest is best-effort; the local directory is not.
        """
        if self.topology is Topology.REMOTE_MANAGED:
            remote = self._require_remote()
            try:
                remote.clear_downloadable_files()
                logger.info("Cleared remote managed downloads.")
            except Exception as e:  # noqa: BLE001
                logger.warning("Could not clear remote downloads: %s", e)

        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            for p in self.download_dir.iterdir():
                if p.is_file() or p.is_symlink():
                    p.unlink()
        except OSError as e:
            raise DownloadPrepareError(
                f"Failed to prepare download directory: {self.download_dir}"
            ) from e
        logger.info("Local download dir ready: %s", self.download_dir)

    # ------------------------------------------------------------------
    # await
    # ------------------------------------------------------------------

    def await_completion(
        self,
        expected_name: Optional[str] = None,
        predicate: Optional[Callable[[str], bool]] = None,
        pattern: Optional[str] = None,
    ) -> CompletedFile:
        """
        Block until a candidate shows the same non-zero size on two consecutive
        polls and return it. Poll errors are logged and retried; only the
        deadline is fatal.
        """
        selector = NameSelector(expected_name=expected_name, predicate=predicate, pattern=pattern)
        poll_once = (
            self._poll_remote if self.topology is Topology.REMOTE_MANAGED else self._poll_directory
        )
        state = _Poll()
        logger.info(
            "Waiting up to %gs for download (topology=%s, %s)",
            self.timeout,
            self.topology.value,
            selector.describe(),
        )

        deadline = self.clock() + self.timeout
        while True:
            try:
                done = poll_once(selector, state)
                if done is not None:
                    state.enter(Phase.DONE)
                    logger.info("%s is stable (%d bytes). Returning.", done.name, done.size)
                    return done
            except Exception as e:  # noqa: BLE001
                logger.warning("Download poll failed: %s", e)
            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            self.sleep(min(self.poll_interval, remaining))

        state.enter(Phase.TIMED_OUT)
        raise DownloadTimeoutError(self.topology.value, selector.describe(), self.timeout)

    def _poll_directory(self, selector: NameSelector, state: _Poll) -> Optional[CompletedFile]:
        state.enter(Phase.LISTING)
        entries = list_directory(self.download_dir)
        entry = choose_local(entries, selector, self.partial_suffixes, pinned=state.pinned)
        if entry is None:
            return None
        state.pinned = entry.name

        state.enter(Phase.STABILITY_CHECK)
        logger.debug(
            "Local %s size=%d (prev=%d)", entry.name, entry.size, state.tracker.last_size
        )
        if state.tracker.observe(entry.name, entry.size):
            return CompletedFile(
                path=self.download_dir / entry.name,
                name=entry.name,
                size=entry.size,
                topology=self.topology,
            )
        return None

    def _poll_remote(self, selector: NameSelector, state: _Poll) -> Optional[CompletedFile]:
        state.enter(Phase.LISTING)
        names = list(self._require_remote().list_downloadable_names())
        logger.debug("Remote file list: %s", ", ".join(names))
        name = choose_remote(names, selector, self.partial_suffixes, pinned=state.pinned)
        if name is None:
            return None
        state.pinned = name

        if name.casefold() not in state.fetched:
            state.enter(Phase.TRANSFERRING)
            self._fetch_once(name)
            state.fetched.add(name.casefold())

        local = self.download_dir / name
        if not local.is_file():
            logger.debug("Local copy of %s not visible yet", name)
            return None

        state.enter(Phase.STABILITY_CHECK)
        size = local.stat().st_size
        logger.debug("%s size=%d (prev=%d)", name, size, state.tracker.last_size)
        if state.tracker.observe(name, size):
            return CompletedFile(path=local, name=name, size=size, topology=self.topology)
        return None

    def _fetch_once(self, name: str) -> None:
        remote = self._require_remote()
        logger.info("Downloading %r -> %s", name, self.download_dir)
        try:
            remote.fetch(name, self.download_dir)
        except FileExistsError:
            logger.info("Local file already exists; continuing to stability check.")
        except Exception as e:
            if "already exists" not in str(e).lower():
                raise
            logger.info("Local file already exists; continuing to stability check.")

    def _require_remote(self) -> RemoteDownloads:
        if self.remote is None:
            raise RuntimeError("remote_managed topology requires a RemoteDownloads capability")
        return self.remote
