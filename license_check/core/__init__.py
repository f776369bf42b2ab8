"""
Core of the vendor license check.

Exposes the directory resolver, the classification backend and the
compliance driver together with the data models they exchange.
"""

from .backend import ClassificationBackend, Deadline
from .compliance import LicenseComplianceChecker, select_license
from .config import LicenseCheckConfig, load_allow_list, load_config
from .models import (
    UNKNOWN_LICENSE,
    ComplianceReport,
    DirectorySnapshot,
    LicenseMatch,
    Match,
    PolicyViolation,
    ResolveResult,
    ResolveStatus,
    ResultCollection,
)
from .oracle import LicenseOracle, PhraseLicenseOracle
from .resolver import DirectoryResolver, take_snapshot

__all__ = [
    'UNKNOWN_LICENSE',
    'ClassificationBackend',
    'ComplianceReport',
    'Deadline',
    'DirectoryResolver',
    'DirectorySnapshot',
    'LicenseCheckConfig',
    'LicenseComplianceChecker',
    'LicenseMatch',
    'LicenseOracle',
    'Match',
    'PhraseLicenseOracle',
    'PolicyViolation',
    'ResolveResult',
    'ResolveStatus',
    'ResultCollection',
    'load_allow_list',
    'load_config',
    'select_license',
    'take_snapshot',
]
