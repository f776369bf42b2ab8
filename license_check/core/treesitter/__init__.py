"""
Tree-sitter integration for comment extraction.

Provides language detection, grammar loading and the comment chunk iterator
used when classifying license headers inside source files.
"""

from .comments import COMMENT_NODE_TYPES, detect_language, extract_chunks
from .languages import get_language
from .parser import get_parser, parse_bytes

__all__ = [
    "COMMENT_NODE_TYPES",
    "detect_language",
    "extract_chunks",
    "get_language",
    "get_parser",
    "parse_bytes",
]
