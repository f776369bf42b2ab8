"""
Tests for the concurrent classification backend.
"""

import threading
import time
from unittest.mock import MagicMock

from license_check.core.backend import ClassificationBackend, Deadline
from license_check.core.errors import ClassificationError, ClassificationTimeout, FileReadError
from license_check.core.models import LicenseMatch


class SlowOracle:
    """Oracle that takes a while per chunk and counts its calls."""

    def __init__(self, delay: float):
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def match(self, text):
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        return [LicenseMatch("MIT", 1.0, 0, len(text))]


class FailingOracle:
    """Oracle that raises on one particular text and matches MIT otherwise."""

    def __init__(self, poison: str):
        self.poison = poison

    def match(self, text):
        if text == self.poison:
            raise RuntimeError("oracle failure")
        return [LicenseMatch("MIT", 1.0, 0, len(text))]


def test_classifies_every_file(tmp_path, tree, mit_text, apache_text):
    tree(tmp_path, {"a/LICENSE": mit_text, "b/COPYING": apache_text})
    files = [str(tmp_path / "a" / "LICENSE"), str(tmp_path / "b" / "COPYING")]
    backend = ClassificationBackend(max_workers=4)

    errors = backend.classify_licenses(files)

    assert errors == []
    by_file = backend.get_results().by_file()
    assert [m.name for m in by_file[files[0]]] == ["MIT"]
    assert [m.name for m in by_file[files[1]]] == ["Apache-2.0"]


def test_unreadable_file_is_isolated(tmp_path, tree, mit_text):
    tree(tmp_path, {"a/LICENSE": mit_text})
    good = str(tmp_path / "a" / "LICENSE")
    missing = str(tmp_path / "gone" / "LICENSE")
    backend = ClassificationBackend()

    errors = backend.classify_licenses([missing, good])

    assert len(errors) == 1
    assert isinstance(errors[0], FileReadError)
    assert errors[0].path == missing
    assert [m.filename for m in backend.get_results().snapshot()] == [good]


def test_oracle_failure_is_isolated_to_its_file(tmp_path, tree, mit_text):
    tree(tmp_path, {"a/LICENSE": "explodes", "b/LICENSE": mit_text})
    bad, good = str(tmp_path / "a" / "LICENSE"), str(tmp_path / "b" / "LICENSE")
    backend = ClassificationBackend(oracle=FailingOracle("explodes"))

    errors = backend.classify_licenses([bad, good])

    assert len(errors) == 1
    assert isinstance(errors[0], ClassificationError)
    assert errors[0].path == bad
    assert isinstance(errors[0].cause, RuntimeError)
    assert [m.filename for m in backend.get_results().snapshot()] == [good]


def test_dual_licensed_file_keeps_all_matches(tmp_path, tree, mit_text, apache_text):
    tree(tmp_path, {"LICENSE": mit_text + "\n" + apache_text})
    backend = ClassificationBackend()

    backend.classify_licenses([str(tmp_path / "LICENSE")])

    assert sorted(m.name for m in backend.get_results().snapshot()) == ["Apache-2.0", "MIT"]


def test_source_files_are_classified_by_comments_only(tmp_path, tree, mit_text):
    literal = 'TEXT = """' + mit_text + '"""\n'
    tree(tmp_path, {"embedded.py": literal})
    path = str(tmp_path / "embedded.py")

    comments_only = ClassificationBackend(restrict_to_comments=True)
    comments_only.classify_licenses([path])
    whole_file = ClassificationBackend(restrict_to_comments=False)
    whole_file.classify_licenses([path])

    assert len(comments_only.get_results()) == 0
    assert [m.name for m in whole_file.get_results().snapshot()] == ["MIT"]


def test_oracle_sees_each_comment_chunk(tmp_path, tree):
    tree(tmp_path, {"header.rs": "// first\n\nfn main() {}\n\n// second\n"})
    oracle = MagicMock()
    oracle.match.return_value = []

    ClassificationBackend(oracle=oracle).classify_licenses([str(tmp_path / "header.rs")])

    assert [c.args[0] for c in oracle.match.call_args_list] == ["first", "second"]


def test_unrecognised_files_are_classified_whole(tmp_path, tree):
    tree(tmp_path, {"LICENSE": "line one\n\nline two\n"})
    oracle = MagicMock()
    oracle.match.return_value = []

    ClassificationBackend(oracle=oracle).classify_licenses([str(tmp_path / "LICENSE")])

    oracle.match.assert_called_once_with("line one\n\nline two\n")


def test_concurrent_appends_are_not_lost(tmp_path, tree, mit_text):
    entries = {f"repo{i}/LICENSE": mit_text for i in range(60)}
    tree(tmp_path, entries)
    files = [str(tmp_path / rel) for rel in entries]
    backend = ClassificationBackend(max_workers=8)

    assert backend.classify_licenses(files) == []

    assert len(backend.get_results()) == 60
    assert set(backend.get_results().by_file()) == set(files)


def test_deadline_returns_promptly_with_timeout(tmp_path, tree):
    entries = {f"repo{i}/LICENSE": "text" for i in range(20)}
    tree(tmp_path, entries)
    files = [str(tmp_path / rel) for rel in entries]
    oracle = SlowOracle(delay=0.25)
    backend = ClassificationBackend(oracle=oracle, max_workers=2)

    start = time.monotonic()
    errors = backend.classify_licenses_with_deadline(files, Deadline.after(0.3))
    elapsed = time.monotonic() - start

    assert len(errors) == 1
    assert isinstance(errors[0], ClassificationTimeout)
    assert elapsed < 1.0
    # Queued files are cancelled rather than left to run
    time.sleep(0.6)
    assert oracle.calls < len(files)


def test_expired_deadline_does_no_work(tmp_path, tree):
    tree(tmp_path, {"LICENSE": "text"})
    oracle = MagicMock()

    errors = ClassificationBackend(oracle=oracle).classify_licenses_with_deadline(
        [str(tmp_path / "LICENSE")], Deadline(expires_at=time.monotonic() - 1)
    )

    assert len(errors) == 1 and isinstance(errors[0], ClassificationTimeout)
    oracle.match.assert_not_called()


def test_deadline_not_hit_returns_normally(tmp_path, tree, mit_text):
    tree(tmp_path, {"LICENSE": mit_text})
    backend = ClassificationBackend()

    errors = backend.classify_licenses_with_deadline([str(tmp_path / "LICENSE")], Deadline.after(30))

    assert errors == []
    assert len(backend.get_results()) == 1


def test_empty_batch():
    assert ClassificationBackend().classify_licenses([]) == []
