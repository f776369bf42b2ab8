"""
Comment extraction for source files.

License headers in source files live in comments, so classification of a
recognised source file only looks at its comment text. Comments that sit on
consecutive lines are merged into one chunk.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from tree_sitter import Node

from .parser import parse_bytes

FilePath = Union[str, Path]

EXTENSION_LANGUAGES = {
    ".py": "python",
    ".pyi": "python",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    # TSX is a superset of the JavaScript grammar
    ".js": "tsx",
    ".jsx": "tsx",
    ".mjs": "tsx",
    ".cjs": "tsx",
    ".rs": "rust",
}

COMMENT_NODE_TYPES = {
    "python": {"comment"},
    "typescript": {"comment"},
    "tsx": {"comment"},
    "rust": {"line_comment", "block_comment"},
}

_LINE_MARKER = re.compile(r"^\s*(?:#!?|//[/!]?)\s?")
_BLOCK_OPEN = re.compile(r"^/\*[*!]?")
_BLOCK_CLOSE = re.compile(r"\*/$")
_BLOCK_LINE_PREFIX = re.compile(r"^\s*\*(?!/)\s?")
_STRING_QUOTES = re.compile(r'^[rRbBuUfF]*("""|\'\'\'|"|\')(.*)\1$', re.DOTALL)


def detect_language(file_path: FilePath) -> Optional[str]:
    """
    Detect the comment grammar for a file from its extension.

    Returns:
        Language id understood by the parser, or None when unrecognised.
    """
    return EXTENSION_LANGUAGES.get(Path(file_path).suffix.lower())


def _is_docstring(node: Node) -> bool:
    parent = node.parent
    return (
        node.type == "string"
        and parent is not None
        and parent.type == "expression_statement"
        and parent.named_child_count == 1
    )


def _comment_nodes(root: Node, language: str) -> Iterator[Node]:
    comment_types = COMMENT_NODE_TYPES[language]
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in comment_types or (language == "python" and _is_docstring(node)):
            yield node
            continue
        stack.extend(reversed(node.children))


def strip_comment_markers(text: str) -> str:
    text = text.strip()
    quoted = _STRING_QUOTES.match(text)
    if quoted:
        return quoted.group(2).strip()
    if text.startswith("/*"):
        text = _BLOCK_CLOSE.sub("", _BLOCK_OPEN.sub("", text))
        lines = [_BLOCK_LINE_PREFIX.sub("", line) for line in text.splitlines()]
        return "\n".join(lines).strip()
    return "\n".join(_LINE_MARKER.sub("", line) for line in text.splitlines())


def extract_chunks(data: bytes, language: str) -> Iterator[str]:
    """
    Yield the comment-only text chunks of ``data``.

    Args:
        data: Raw file contents.
        language: Language id from ``detect_language``.
    """
    if language not in COMMENT_NODE_TYPES:
        raise ValueError(f"Unsupported language: {language}")
    tree = parse_bytes(data, language)

    current: List[str] = []
    last_row = -2
    for node in _comment_nodes(tree.root_node, language):
        text = data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
        if current and node.start_point[0] > last_row + 1:
            yield "\n".join(current)
            current = []
        current.append(strip_comment_markers(text))
        end_row, end_column = node.end_point[0], node.end_point[1]
        # Line comments may include their newline and end at column 0 of the next row
        last_row = end_row - 1 if end_column == 0 and end_row > node.start_point[0] else end_row
    if current:
        yield "\n".join(current)
