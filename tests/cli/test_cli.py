"""
Tests for the license-check command line.
"""

import argparse
import json
import os
import time

import pytest

from license_check.cli.license_check import build_parser, parse_duration, run
from license_check.core.backend import Deadline


@pytest.mark.parametrize("value, seconds", [
    ("5m", 300.0),
    ("30s", 30.0),
    ("1h30m", 5400.0),
    ("250ms", 0.25),
    ("45", 45.0),
    ("1.5s", 1.5),
])
def test_parse_duration(value, seconds):
    assert parse_duration(value) == pytest.approx(seconds)


@pytest.mark.parametrize("value", ["", "soon", "5x", "m5", "0", "-3s", "nan", "inf"])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(argparse.ArgumentTypeError):
        parse_duration(value)


def test_parser_leaves_unset_flags_as_none():
    args = build_parser().parse_args([])

    assert args.vendor_path is None
    assert args.license_files is None
    assert args.restrict_to_comments is None

    args = build_parser().parse_args(["--no-comments-only", "--timeout", "2m"])
    assert args.restrict_to_comments is False
    assert args.timeout_seconds == 120.0


def test_passing_run(tmp_path, vendor_dir, tree, mit_text, capsys):
    tree(vendor_dir, {"hostA/repoA/LICENSE": mit_text, "hostB/repoB/": None})
    output = tmp_path / "report.json"

    code = run(["--path", str(vendor_dir), "--output", str(output)])

    assert code == 0
    assert "Dependencies license check passed! Good job!" in capsys.readouterr().out
    assert json.loads(output.read_text()) == {"MIT": ["hostA/repoA"], "Unknown": ["hostB/repoB"]}


def test_forbidden_license_fails(tmp_path, vendor_dir, tree, mit_text, gpl3_text, capsys):
    tree(vendor_dir, {"h/a/LICENSE": mit_text, "h/b/LICENSE": gpl3_text})
    (tmp_path / ".license").write_text("MIT\n")

    code = run(["--path", str(vendor_dir)])

    assert code == 1
    out = capsys.readouterr().out
    assert out.startswith("Error:")
    assert "GPL-3.0" in out


def test_zero_matches_fails(vendor_dir, tree, capsys):
    tree(vendor_dir, {"h/a/LICENSE": "mystery"})

    assert run(["--path", str(vendor_dir)]) == 1
    assert "couldn't classify license(s)" in capsys.readouterr().out


def test_custom_files_flag(vendor_dir, tree, mit_text, capsys):
    tree(vendor_dir, {"h/a/NOTICE": mit_text})

    assert run(["--path", str(vendor_dir), "--files", "notice"]) == 0
    assert "passed" in capsys.readouterr().out


def test_timeout_is_reported(vendor_dir, tree, mit_text, capsys, monkeypatch):
    tree(vendor_dir, {"h/a/LICENSE": mit_text})
    monkeypatch.setattr(Deadline, "after", classmethod(lambda cls, seconds: cls(time.monotonic() - 1)))

    code = run(["--path", str(vendor_dir), "--timeout", "1ms"])

    assert code == 1
    assert capsys.readouterr().out.strip() == "Timeout while processing the licenses!"


def test_unreadable_license_file_fails_after_scan(vendor_dir, tree, mit_text, capsys):
    tree(vendor_dir, {"h/a/LICENSE": mit_text, "h/b/": None})
    os.symlink(vendor_dir / "missing-target", vendor_dir / "h" / "b" / "LICENSE")

    code = run(["--path", str(vendor_dir)])

    out = capsys.readouterr().out
    assert code == 1
    assert out.startswith("Error: unable to read")
    assert "passed" not in out
