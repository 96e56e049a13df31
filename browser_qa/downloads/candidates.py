"""
Download candidates: eligibility, selection and the stability rule.

Names are compared case-insensitively. A name carrying a partial-download
suffix or starting with a dot is never eligible, whatever its size.
"""
# @file purpose: Pure selection/stability logic shared by all download topologies.

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ..core.settings import DEFAULT_PARTIAL_SUFFIXES


class Topology(str, Enum):
    LOCAL = "local"
    REMOTE_MANAGED = "remote_managed"
    REMOTE_MOUNTED = "remote_mounted"


def is_partial(name: str, suffixes: Sequence[str] = DEFAULT_PARTIAL_SUFFIXES) -> bool:
    lowered = name.lower()
    return any(lowered.endswith(s.lower()) for s in suffixes)


def is_hidden(name: str) -> bool:
    # e.g. .com.google.Chrome.XXXXXX
    return name.startswith(".")


def is_eligible(name: str, suffixes: Sequence[str] = DEFAULT_PARTIAL_SUFFIXES) -> bool:
    return bool(name) and not is_hidden(name) and not is_partial(name, suffixes)


@dataclass(frozen=True)
class NameSelector:
    """Which download the caller is waiting for. All fields empty means "the latest one"."""

    expected_name: Optional[str] = None
    predicate: Optional[Callable[[str], bool]] = None
    pattern: Optional[str] = None

    @property
    def exact(self) -> bool:
        return bool(self.expected_name)

    def matches(self, name: str) -> bool:
        if self.expected_name and name.casefold() != self.expected_name.casefold():
            return False
        if self.pattern and not fnmatch.fnmatch(name.lower(), self.pattern.lower()):
            return False
        if self.predicate is not None and not self.predicate(name):
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.expected_name:
            parts.append(f"name={self.expected_name!r}")
        if self.pattern:
            parts.append(f"pattern={self.pattern!r}")
        if self.predicate is not None:
            parts.append(f"predicate={getattr(self.predicate, '__name__', repr(self.predicate))}")
        return ", ".join(parts) or "latest"


@dataclass(frozen=True)
class FileEntry:
    """One file observed in a directory listing."""

    name: str
    size: int
    mtime: float


def list_directory(directory: Path) -> list[FileEntry]:
    entries = []
    for p in directory.iterdir():
        if p.is_file():
            st = p.stat()
            entries.append(FileEntry(name=p.name, size=st.st_size, mtime=st.st_mtime))
    return entries


def _find(names: Iterable[str], wanted: Optional[str]) -> Optional[str]:
    if not wanted:
        return None
    key = wanted.casefold()
    return next((n for n in names if n.casefold() == key), None)


def choose_local(
    entries: Sequence[FileEntry],
    selector: NameSelector,
    suffixes: Sequence[str] = DEFAULT_PARTIAL_SUFFIXES,
    pinned: Optional[str] = None,
) -> Optional[FileEntry]:
    """
    The pinned candidate while it is still listed; otherwise the most recently
    modified eligible entry matching `selector` (ties: greatest name).
    """
    eligible = [e for e in entries if is_eligible(e.name, suffixes) and selector.matches(e.name)]
    if not eligible:
        return None
    keep = _find((e.name for e in eligible), pinned)
    if keep is not None:
        return next(e for e in eligible if e.name == keep)
    return max(eligible, key=lambda e: (e.mtime, e.name))


def choose_remote(
    names: Sequence[str],
    selector: NameSelector,
    suffixes: Sequence[str] = DEFAULT_PARTIAL_SUFFIXES,
    pinned: Optional[str] = None,
) -> Optional[str]:
    """
    Selection order for a managed-download listing:
      1) exact expected name (None until it shows up)
      2) first eligible name satisfying the predicate/pattern
      3) lexicographically last eligible name
    A pinned name wins while it is still listed and still matches.
    """
    eligible = [n for n in names if is_eligible(n, suffixes) and selector.matches(n)]
    keep = _find(eligible, pinned)
    if keep is not None:
        return keep
    if selector.exact:
        return _find(eligible, selector.expected_name)
    if selector.predicate is not None or selector.pattern:
        return eligible[0] if eligible else None
    return max(eligible) if eligible else None


class StabilityTracker:
    """
    Completion signal: the same name observed with the same non-zero size on
    two consecutive polls. A single non-zero size is never enough.
    """

    def __init__(self) -> None:
        self.last_name: Optional[str] = None
        self.last_size: int = -1

    def observe(self, name: str, size: int) -> bool:
        stable = (
            self.last_name is not None
            and self.last_name.casefold() == name.casefold()
            and size > 0
            and size == self.last_size
        )
        self.last_name = name
        self.last_size = size
        return stable
