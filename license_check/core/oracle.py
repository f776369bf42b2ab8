"""
License classification oracles.

An oracle turns a chunk of text into the licenses it recognises. The scan
only depends on the ``LicenseOracle`` protocol; ``PhraseLicenseOracle`` is the
default implementation, matching anchor phrases of common SPDX licenses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from .config import DEFAULT_CONFIDENCE_THRESHOLD
from .models import LicenseMatch


class LicenseOracle(Protocol):
    def match(self, text: str) -> List[LicenseMatch]:
        ...


@dataclass(frozen=True)
class LicensePattern:
    name: str
    phrases: Tuple[str, ...]
    excludes: Tuple[str, ...] = ()


DEFAULT_PATTERNS: Tuple[LicensePattern, ...] = (
    LicensePattern(
        "MIT",
        ("permission is hereby granted, free of charge, to any person obtaining a copy",
         "the above copyright notice and this permission notice shall be included",
         "the software is provided as is, without warranty of any kind"),
        excludes=("boost software license",),
    ),
    LicensePattern(
        "Apache-2.0",
        ("apache license", "version 2.0, january 2004",
         "terms and conditions for use, reproduction, and distribution"),
    ),
    LicensePattern(
        "BSD-3-Clause",
        ("redistribution and use in source and binary forms, with or without modification",
         "neither the name of",
         "this software is provided by the copyright holders and contributors as is"),
        excludes=("all advertising materials mentioning features or use of this software",),
    ),
    LicensePattern(
        "BSD-2-Clause",
        ("redistribution and use in source and binary forms, with or without modification",
         "this software is provided by the copyright holders and contributors as is"),
        excludes=("neither the name of",
                  "all advertising materials mentioning features or use of this software"),
    ),
    LicensePattern(
        "ISC",
        ("permission to use, copy, modify, and/or distribute this software for any purpose",
         "the software is provided as is and the author disclaims all warranties"),
    ),
    LicensePattern(
        "MPL-2.0",
        ("mozilla public license version 2.0",
         "exhibit a - source code form license notice"),
    ),
    # The GPL family texts mention each other, so every phrase is anchored
    # on the versioned title or the preamble.
    LicensePattern(
        "GPL-2.0",
        ("gnu general public license version 2, june 1991",
         "the licenses for most software are designed to take away your freedom to share and change it"),
    ),
    LicensePattern(
        "GPL-3.0",
        ("gnu general public license version 3, 29 june 2007",
         "the gnu general public license is a free, copyleft license for software and other kinds of works"),
    ),
    LicensePattern(
        "LGPL-2.1",
        ("gnu lesser general public license version 2.1, february 1999",
         "this license, the lesser general public license, applies to some specially designated software"),
    ),
    LicensePattern(
        "LGPL-3.0",
        ("gnu lesser general public license version 3, 29 june 2007",
         "this version of the gnu lesser general public license incorporates the terms and conditions"),
    ),
    LicensePattern(
        "AGPL-3.0",
        ("gnu affero general public license version 3, 19 november 2007",
         "the gnu affero general public license is a free, copyleft license for software and other kinds of works"),
    ),
    LicensePattern(
        "EPL-2.0",
        ("eclipse public license - v 2.0",
         "the accompanying program is provided under the terms of this eclipse public license"),
    ),
    LicensePattern(
        "BSL-1.0",
        ("boost software license - version 1.0",
         "permission is hereby granted, free of charge, to any person or organization"),
    ),
    LicensePattern(
        "Unlicense",
        ("this is free and unencumbered software released into the public domain",
         "anyone is free to copy, modify, publish, use, compile, sell, or distribute this software"),
    ),
    LicensePattern(
        "CC0-1.0",
        ("cc0 1.0 universal",
         "creative commons corporation is not a law firm"),
    ),
)

_QUOTES = {'"', "'", "“", "”", "‘", "’"}


def normalize_text(text: str) -> Tuple[str, List[int]]:
    """
    Case-fold ``text``, drop quotes and collapse whitespace runs.

    Returns the normalised text and, for every character in it, the index of
    the character it came from in the original.
    """
    out: List[str] = []
    index: List[int] = []
    pending_space: Optional[int] = None
    for i, ch in enumerate(text):
        if ch in _QUOTES:
            continue
        if ch.isspace():
            if pending_space is None:
                pending_space = i
            continue
        if pending_space is not None:
            if out:
                out.append(" ")
                index.append(pending_space)
            pending_space = None
        out.append(ch.lower())
        index.append(i)
    return "".join(out), index


class PhraseLicenseOracle:
    """Anchor-phrase license matcher."""

    def __init__(self, threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
                 patterns: Tuple[LicensePattern, ...] = DEFAULT_PATTERNS):
        self.threshold = threshold
        self.patterns = patterns

    def match(self, text: str) -> List[LicenseMatch]:
        normalized, index = normalize_text(text)
        if not normalized:
            return []

        matches: List[LicenseMatch] = []
        for pattern in self.patterns:
            if any(phrase in normalized for phrase in pattern.excludes):
                continue
            spans = []
            for phrase in pattern.phrases:
                pos = normalized.find(phrase)
                if pos >= 0:
                    spans.append((pos, pos + len(phrase)))
            confidence = len(spans) / len(pattern.phrases)
            if not spans or confidence < self.threshold:
                continue
            start = index[min(s for s, _ in spans)]
            end = index[max(e for _, e in spans) - 1] + 1
            offset = len(text[:start].encode("utf-8"))
            extent = len(text[start:end].encode("utf-8"))
            matches.append(LicenseMatch(pattern.name, confidence, offset, extent))

        matches.sort(key=lambda m: m.offset)
        return matches
