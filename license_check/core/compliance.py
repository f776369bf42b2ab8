"""
Compliance driver: scan a vendor tree, classify its licenses and enforce the
allow-list.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .backend import ClassificationBackend, Deadline
from .config import LicenseCheckConfig, load_allow_list
from .errors import (
    ClassificationTimeout,
    DirectoryReadError,
    LicenseCheckError,
    NoLicenseMatchError,
    PolicyViolationError,
)
from .models import UNKNOWN_LICENSE, ComplianceReport, Match, PolicyViolation, ResolveStatus
from .oracle import LicenseOracle, PhraseLicenseOracle
from .resolver import DirectoryResolver, take_snapshot

logger = logging.getLogger(__name__)


def select_license(matches: Sequence[Match], policy: str = "highest_confidence") -> Optional[Match]:
    """
    Pick the one match that decides a file's license.

    ``highest_confidence`` keeps the earliest of the best-scoring matches;
    ``last`` keeps whatever the oracle reported last.
    """
    if not matches:
        return None
    if policy == "last":
        return matches[-1]
    if policy == "highest_confidence":
        best = matches[0]
        for match in matches[1:]:
            if match.confidence > best.confidence:
                best = match
        return best
    raise ValueError(f"Unknown match policy: {policy}")


def find_violations(report: ComplianceReport, allowed: set) -> List[PolicyViolation]:
    """Every bucket whose license is not allowed, in license-name order."""
    if not allowed:
        return []
    return [
        PolicyViolation(license=name, dependencies=tuple(report.dependencies(name)))
        for name in report.licenses()
        if name not in allowed
    ]


def write_report(report: ComplianceReport, output_path: str) -> None:
    payload = json.dumps(report.to_dict(), indent=4)
    fd = os.open(output_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(payload)
    logger.info(f"Report written to {output_path}")


class LicenseComplianceChecker:
    """Orchestrates one scan of a host/repo vendor tree."""

    def __init__(self, config: LicenseCheckConfig, oracle: Optional[LicenseOracle] = None):
        self.config = config
        self.oracle = oracle if oracle is not None else PhraseLicenseOracle(config.confidence_threshold)
        self.resolver = DirectoryResolver(config.license_files)
        self.read_errors: List[LicenseCheckError] = []

    def _backend(self) -> ClassificationBackend:
        return ClassificationBackend(
            oracle=self.oracle,
            max_workers=self.config.max_workers,
            restrict_to_comments=self.config.restrict_to_comments,
            show_progress=self.config.show_progress,
        )

    def _relative(self, vendor_path: str, path: str) -> str:
        return Path(os.path.relpath(path, vendor_path)).as_posix()

    def _list_dirs(self, path: str) -> List[str]:
        try:
            snapshot = take_snapshot(path)
        except OSError as e:
            raise DirectoryReadError(path, e) from e
        return [os.path.join(path, name) for name in sorted(snapshot.dirs)]

    def _check_deadline(self, deadline: Optional[Deadline]) -> None:
        if deadline is not None and deadline.expired():
            raise ClassificationTimeout()

    def scan(self, vendor_path: str, report: ComplianceReport,
             deadline: Optional[Deadline] = None) -> Dict[str, str]:
        """
        Resolve every repo under ``vendor_path``.

        Unlicensed repos go straight into the "Unknown" bucket.

        Returns:
            Mapping of license candidate file path to its repo, relative to the
            vendor root.
        """
        candidates: Dict[str, str] = {}
        repo_count = 0
        for host_path in self._list_dirs(vendor_path):
            try:
                repo_paths = self._list_dirs(host_path)
            except DirectoryReadError as e:
                if self.config.abort_on_read_error:
                    raise
                logger.warning(f"Skipping host: {e}")
                self.read_errors.append(e)
                continue

            for repo_path in repo_paths:
                self._check_deadline(deadline)
                repo_count += 1
                repo = self._relative(vendor_path, repo_path)
                repo_candidates: List[str] = []
                result = self.resolver.resolve(repo_path, repo_candidates, deadline)

                if result.status is ResolveStatus.FOUND:
                    for candidate in repo_candidates:
                        candidates[candidate] = repo
                    continue
                if result.status is ResolveStatus.READ_ERROR:
                    error = DirectoryReadError(result.path, result.cause)
                    if self.config.abort_on_read_error:
                        raise error
                    self.read_errors.append(error)
                logger.debug(f"No license file covers {repo}")
                report.add(UNKNOWN_LICENSE, repo)

        logger.info(f"Scanned {repo_count} repo(s), found {len(candidates)} license file(s)")
        return candidates

    def classify(self, candidates: Dict[str, str], report: ComplianceReport,
                 deadline: Optional[Deadline] = None) -> None:
        """Classify every candidate file and bucket its repo."""
        if not candidates:
            return
        filenames = list(candidates)
        backend = self._backend()
        if deadline is not None:
            errors = backend.classify_licenses_with_deadline(filenames, deadline)
        else:
            errors = backend.classify_licenses(filenames)

        unreadable = set()
        for error in errors:
            if isinstance(error, ClassificationTimeout):
                raise error
            self.read_errors.append(error)
            unreadable.add(getattr(error, "path", None))

        results = backend.get_results()
        if len(results) == 0:
            raise NoLicenseMatchError(len(filenames))

        by_file = results.by_file()
        for filename, repo in candidates.items():
            chosen = select_license(by_file.get(filename, []), self.config.match_policy)
            if chosen is None:
                if filename not in unreadable:
                    logger.warning(f"No license recognised in {filename}")
                report.add(UNKNOWN_LICENSE, repo)
                continue
            report.add(chosen.name, repo)

    def process(self, vendor_path: Optional[str] = None, output_path: Optional[str] = None,
                deadline: Optional[Deadline] = None) -> ComplianceReport:
        """
        Run a full compliance check.

        Raises:
            DirectoryReadError: a directory could not be read.
            ClassificationTimeout: ``deadline`` passed before the run finished.
            NoLicenseMatchError: no license was recognised in any candidate file.
            PolicyViolationError: licenses outside the allow-list are in use;
                the report is still written beforehand.
        """
        vendor_path = vendor_path or self.config.vendor_path
        output_path = output_path if output_path is not None else self.config.output_path
        self.read_errors = []

        report = ComplianceReport()
        candidates = self.scan(vendor_path, report, deadline)
        self.classify(candidates, report, deadline)

        if output_path:
            self._check_deadline(deadline)
            write_report(report, output_path)

        allowed = load_allow_list(self.config.resolved_allow_list_path(vendor_path))
        violations = find_violations(report, allowed)
        for violation in violations:
            logger.warning(violation.describe())
        if violations:
            raise PolicyViolationError(violations)
        return report
