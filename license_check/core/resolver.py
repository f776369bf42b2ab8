"""
Bottom-up resolution of license files in a dependency subtree.

A directory is licensed when it holds one of the configured license files
directly, or when it has subdirectories and every one of them is licensed.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence

from .backend import Deadline
from .errors import ClassificationTimeout
from .models import DirectorySnapshot, ResolveResult, ResolveStatus

logger = logging.getLogger(__name__)


def take_snapshot(path: str) -> DirectorySnapshot:
    """
    List the immediate subdirectories and files of ``path``.

    Symlinks are recorded as files and never followed.

    Raises:
        OSError: if the directory cannot be read.
    """
    dirs = set()
    files = {}
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                dirs.add(entry.name)
            else:
                files[entry.name.upper()] = entry.name
    return DirectorySnapshot(path=path, dirs=frozenset(dirs), files=files)


class DirectoryResolver:
    """Decides per dependency whether a license file covers its subtree."""

    def __init__(self, license_files: Sequence[str]):
        self.license_files = [name.upper() for name in license_files]

    def license_file(self, snapshot: DirectorySnapshot) -> Optional[str]:
        """Return the real name of the first configured license file present."""
        for name in self.license_files:
            found = snapshot.find_file(name)
            if found is not None:
                return found
        return None

    def snapshot(self, path: str) -> DirectorySnapshot:
        return take_snapshot(path)

    def resolve(self, path: str, candidates: List[str],
                deadline: Optional[Deadline] = None) -> ResolveResult:
        """
        Resolve ``path`` and append any license files found to ``candidates``.

        Subdirectories are visited in name order and the walk stops at the
        first one that is not licensed.

        Raises:
            ClassificationTimeout: ``deadline`` passed during the walk.
        """
        if deadline is not None and deadline.expired():
            raise ClassificationTimeout()
        try:
            snapshot = self.snapshot(path)
        except OSError as e:
            logger.warning(f"Error reading {path!r} directory: {e}")
            return ResolveResult(ResolveStatus.READ_ERROR, path, cause=e)

        license_file = self.license_file(snapshot)
        if license_file is not None:
            candidates.append(os.path.join(snapshot.path, license_file))
            return ResolveResult(ResolveStatus.FOUND, path)

        for sub_dir in sorted(snapshot.dirs):
            result = self.resolve(os.path.join(snapshot.path, sub_dir), candidates, deadline)
            if not result.found:
                if result.status is ResolveStatus.READ_ERROR:
                    return result
                return ResolveResult(ResolveStatus.NOT_FOUND, path)

        if snapshot.dirs:
            return ResolveResult(ResolveStatus.FOUND, path)
        return ResolveResult(ResolveStatus.NOT_FOUND, path)
