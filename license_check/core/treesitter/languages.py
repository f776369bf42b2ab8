"""
Tree-sitter grammars available to the comment extractor.
"""

from functools import lru_cache
from typing import Any, Callable, Dict

import tree_sitter_python
import tree_sitter_rust
import tree_sitter_typescript
from tree_sitter import Language

_GRAMMARS: Dict[str, Callable[[], Any]] = {
    "python": tree_sitter_python.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
    "rust": tree_sitter_rust.language,
}


@lru_cache(maxsize=None)
def get_language(language_id: str) -> Language:
    grammar = _GRAMMARS.get(language_id)
    if grammar is None:
        raise ValueError(f"Unsupported language: {language_id}")
    return Language(grammar())
