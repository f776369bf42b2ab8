"""Exceptions raised by the license compliance scan."""

from __future__ import annotations

from typing import Sequence

from .models import PolicyViolation


class LicenseCheckError(Exception):
    """Base class for every failure of a license check run."""


class DirectoryReadError(LicenseCheckError):
    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"error reading {path!r} directory: {cause}")
        self.path = path
        self.cause = cause


class FileReadError(LicenseCheckError):
    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"unable to read {path!r}: {cause}")
        self.path = path
        self.cause = cause


class ClassificationError(LicenseCheckError):
    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"unable to classify {path!r}: {cause}")
        self.path = path
        self.cause = cause


class ClassificationTimeout(LicenseCheckError):
    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message)


class NoLicenseMatchError(LicenseCheckError):
    def __init__(self, file_count: int):
        super().__init__(f"couldn't classify license(s) in {file_count} candidate file(s)")
        self.file_count = file_count


class PolicyViolationError(LicenseCheckError):
    def __init__(self, violations: Sequence[PolicyViolation]):
        names = ", ".join(v.license for v in violations)
        super().__init__(f"forbidden license(s): {names}")
        self.violations = list(violations)
