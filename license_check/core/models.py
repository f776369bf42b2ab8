"""
Core data models for the license compliance scan.

This module contains the plain data structures that flow between the
directory resolver, the classification backend and the compliance driver.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

UNKNOWN_LICENSE = "Unknown"


@dataclass(frozen=True)
class DirectorySnapshot:
    """Immutable view of one directory at scan time."""
    path: str
    dirs: FrozenSet[str]
    # Upper-cased file name -> real on-disk name
    files: Dict[str, str] = field(default_factory=dict)

    def find_file(self, upper_name: str) -> Optional[str]:
        return self.files.get(upper_name)


class ResolveStatus(Enum):
    """Outcome of resolving one directory subtree."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    READ_ERROR = "read_error"


@dataclass(frozen=True)
class ResolveResult:
    status: ResolveStatus
    path: str
    cause: Optional[BaseException] = None

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND


@dataclass(frozen=True)
class LicenseMatch:
    """A single license detected by the oracle inside one chunk of text."""
    name: str
    confidence: float
    offset: int  # byte offset into the chunk
    extent: int  # byte length of the matched span


@dataclass(frozen=True)
class Match:
    """A license match attributed to the file it was found in."""
    filename: str
    name: str
    confidence: float
    offset: int
    extent: int

    @classmethod
    def from_license_match(cls, filename: str, match: LicenseMatch) -> "Match":
        return cls(
            filename=filename,
            name=match.name,
            confidence=match.confidence,
            offset=match.offset,
            extent=match.extent,
        )


class ResultCollection:
    """
    Append-only, lock-guarded sequence of matches.

    Any worker may append; readers take a snapshot once every worker has
    finished. Matches are never removed or mutated after insertion.
    """

    def __init__(self) -> None:
        self._matches: List[Match] = []
        self._lock = threading.Lock()

    def extend(self, matches: Iterable[Match]) -> None:
        batch = list(matches)
        if not batch:
            return
        with self._lock:
            self._matches.extend(batch)

    def snapshot(self) -> Tuple[Match, ...]:
        with self._lock:
            return tuple(self._matches)

    def by_file(self) -> Dict[str, List[Match]]:
        grouped: Dict[str, List[Match]] = {}
        for match in self.snapshot():
            grouped.setdefault(match.filename, []).append(match)
        return grouped

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)


@dataclass(frozen=True)
class PolicyViolation:
    """A license bucket that is not on the allow-list."""
    license: str
    dependencies: Tuple[str, ...]

    def describe(self) -> str:
        return f'This dependencies use forbidden license "{self.license}": {", ".join(self.dependencies)}'


class ComplianceReport:
    """Mapping of license name to the dependencies that carry it."""

    def __init__(self) -> None:
        self._buckets: Dict[str, set] = {}

    def add(self, license_name: str, dependency: str) -> None:
        self._buckets.setdefault(license_name, set()).add(dependency)

    def licenses(self) -> List[str]:
        return sorted(self._buckets)

    def dependencies(self, license_name: str) -> List[str]:
        return sorted(self._buckets.get(license_name, ()))

    def to_dict(self) -> Dict[str, List[str]]:
        return {name: self.dependencies(name) for name in self.licenses()}
