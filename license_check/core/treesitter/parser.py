"""
Tree-sitter parser facade.

Parsers are not safe to share between threads, so each worker thread keeps
its own instance per language.
"""

import threading

from tree_sitter import Parser, Tree

from .languages import get_language

_local = threading.local()


def get_parser(language_id: str) -> Parser:
    parsers = getattr(_local, "parsers", None)
    if parsers is None:
        parsers = _local.parsers = {}
    parser = parsers.get(language_id)
    if parser is None:
        parser = Parser()
        parser.language = get_language(language_id)
        parsers[language_id] = parser
    return parser


def parse_bytes(data: bytes, language_id: str) -> Tree:
    return get_parser(language_id).parse(data)
