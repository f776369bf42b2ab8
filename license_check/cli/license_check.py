"""
Command line entry point for the vendor license check.
"""

import argparse
import logging
import math
import re
import sys
from typing import Any, Dict, List, Optional

from license_check.core.backend import Deadline
from license_check.core.compliance import LicenseComplianceChecker
from license_check.core.config import DEFAULT_LICENSE_FILES, DEFAULT_VENDOR_PATH, load_config
from license_check.core.errors import ClassificationTimeout, LicenseCheckError

logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str) -> float:
    """
    Parse a duration such as ``5m``, ``90s``, ``1h30m`` or ``45`` into seconds.
    """
    text = value.strip().lower()
    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        for part in _DURATION_PART.finditer(text):
            if part.start() != pos:
                break
            seconds += float(part.group(1)) * _DURATION_UNITS[part.group(2)]
            pos = part.end()
        if pos == 0 or pos != len(text):
            raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    if not math.isfinite(seconds):
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"duration must be positive: {value!r}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check the licenses of vendored dependencies against an allow-list."
    )
    parser.add_argument("--path", dest="vendor_path", default=None,
                        help=f"Path of 'vendor' directory (default: {DEFAULT_VENDOR_PATH})")
    parser.add_argument("--output", dest="output_path", default=None,
                        help="Write per dependency license to 'json' file")
    parser.add_argument("--files", dest="license_files", default=None,
                        help="Comma separated list of license file names - case insensitive "
                             f"(default: {','.join(DEFAULT_LICENSE_FILES)})")
    parser.add_argument("--timeout", dest="timeout_seconds", type=parse_duration, default=None,
                        help="Max execution time of the license check, e.g. 5m, 30s (default: 5m)")
    parser.add_argument("--config", help="Path to configuration YAML file (default: licensecheck.config.yaml)")
    parser.add_argument("--allow-list", dest="allow_list_path", default=None,
                        help="Allowed licenses, one per line (default: .license next to the vendor directory)")
    parser.add_argument("--workers", dest="max_workers", type=int, default=None,
                        help="Maximum number of files classified concurrently")
    parser.add_argument("--match-policy", choices=["highest_confidence", "last"], default=None,
                        help="How to pick one license when a file matches several")
    parser.add_argument("--no-comments-only", dest="restrict_to_comments", action="store_false", default=None,
                        help="Classify whole source files instead of only their comments")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    keys = ("vendor_path", "output_path", "license_files", "timeout_seconds",
            "allow_list_path", "max_workers", "match_policy", "restrict_to_comments")
    return {key: getattr(args, key) for key in keys}


def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = load_config(config_path=args.config, cli_args=_cli_overrides(args))
    config = config.model_copy(update={"show_progress": sys.stderr.isatty()})
    deadline = Deadline.after(config.timeout_seconds)

    checker = LicenseComplianceChecker(config)
    try:
        checker.process(deadline=deadline)
    except ClassificationTimeout:
        print("Timeout while processing the licenses!")
        return 1
    except LicenseCheckError as e:
        print(f"Error: {e}")
        return 1

    if checker.read_errors:
        for error in checker.read_errors:
            print(f"Error: {error}")
        return 1

    print("Dependencies license check passed! Good job!")
    return 0


def main():
    """Main entry point for the license check."""
    sys.exit(run())


if __name__ == "__main__":
    main()
