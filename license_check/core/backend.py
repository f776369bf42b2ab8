"""
Concurrent license classification of candidate files.

Each candidate file is read, reduced to its comment text when its language
is recognised, and every chunk is fed to the license oracle. Matches land in
a shared ``ResultCollection``.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from tqdm import tqdm

from .config import DEFAULT_MAX_WORKERS
from .errors import ClassificationError, ClassificationTimeout, FileReadError, LicenseCheckError
from .models import Match, ResultCollection
from .oracle import LicenseOracle, PhraseLicenseOracle
from .treesitter import detect_language, extract_chunks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deadline:
    """A point in time, on the monotonic clock, after which work is abandoned."""
    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class _Cancelled(Exception):
    """Raised inside a worker once the run has been cancelled."""


class ClassificationBackend:
    """Classifies license files over a bounded thread pool."""

    def __init__(
        self,
        oracle: Optional[LicenseOracle] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        restrict_to_comments: bool = True,
        show_progress: bool = False,
    ):
        self.oracle = oracle if oracle is not None else PhraseLicenseOracle()
        self.max_workers = max_workers
        self.restrict_to_comments = restrict_to_comments
        self.show_progress = show_progress
        self.results = ResultCollection()

    def classify_licenses(self, filenames: Sequence[str]) -> List[LicenseCheckError]:
        """
        Classify every file and wait for all of them.

        Returns:
            One ``FileReadError`` per file that could not be read and one
            ``ClassificationError`` per file the oracle or parser failed on.
        """
        return self._run(filenames, deadline=None)

    def classify_licenses_with_deadline(self, filenames: Sequence[str],
                                        deadline: Deadline) -> List[LicenseCheckError]:
        """
        Classify every file, giving up when ``deadline`` passes.

        On expiry the call returns promptly with a single
        ``ClassificationTimeout``; workers still running stop at their next
        checkpoint and queued files are never started.
        """
        return self._run(filenames, deadline=deadline)

    def get_results(self) -> ResultCollection:
        return self.results

    def _run(self, filenames: Sequence[str], deadline: Optional[Deadline]) -> List[LicenseCheckError]:
        if not filenames:
            return []
        if deadline is not None and deadline.expired():
            return [ClassificationTimeout()]

        cancel = threading.Event()
        errors: List[LicenseCheckError] = []
        workers = min(self.max_workers, len(filenames))
        logger.info(f"Classifying {len(filenames)} license file(s) with {workers} worker(s)")

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="license-classify")
        futures: List[Future] = [
            executor.submit(self._classify_license, filename, cancel) for filename in filenames
        ]
        progress = tqdm(total=len(futures), desc="Classifying licenses", unit="file",
                        disable=not self.show_progress)
        for future in futures:
            future.add_done_callback(lambda _: progress.update(1))

        try:
            timeout = deadline.remaining() if deadline is not None else None
            _, pending = wait(futures, timeout=timeout)
            if pending:
                cancel.set()
                logger.warning(f"Deadline exceeded with {len(pending)} file(s) unclassified")
                return [ClassificationTimeout()]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
            progress.close()

        for future in futures:
            error = future.result()
            if error is not None:
                errors.append(error)
        return errors

    def _classify_license(self, filename: str, cancel: threading.Event) -> Optional[LicenseCheckError]:
        try:
            if cancel.is_set():
                raise _Cancelled()
            try:
                with open(filename, "rb") as f:
                    contents = f.read()
            except OSError as e:
                logger.warning(f"Unable to read {filename!r}: {e}")
                return FileReadError(filename, e)

            try:
                matches = self._match_chunks(filename, self._chunks(filename, contents), cancel)
            except _Cancelled:
                raise
            except Exception as e:
                logger.warning(f"Unable to classify {filename!r}: {e}")
                return ClassificationError(filename, e)
            if cancel.is_set():
                raise _Cancelled()
            self.results.extend(matches)
        except _Cancelled:
            logger.debug(f"Classification of {filename} cancelled")
        return None

    def _chunks(self, filename: str, contents: bytes) -> Iterable[str]:
        language = detect_language(filename) if self.restrict_to_comments else None
        if language is None:
            return [contents.decode("utf-8", errors="replace")]
        return extract_chunks(contents, language)

    def _match_chunks(self, filename: str, chunks: Iterable[str], cancel: threading.Event) -> List[Match]:
        matches: List[Match] = []
        for chunk in chunks:
            if cancel.is_set():
                raise _Cancelled()
            for license_match in self.oracle.match(chunk):
                matches.append(Match.from_license_match(filename, license_match))
        return matches
