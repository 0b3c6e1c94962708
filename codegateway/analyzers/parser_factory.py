from functools import lru_cache
from pathlib import PurePosixPath
from typing import Optional

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language

EXTENSION_TO_LANGUAGE = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".cs": "csharp",
}

# Grammar used to parse each extension. JSX is part of the javascript grammar,
# TSX needs its own.
EXTENSION_TO_GRAMMAR = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

_GRAMMAR_LOADERS = {
    "javascript": tsjavascript.language,
    "typescript": tstypescript.language_typescript,
    "tsx": tstypescript.language_tsx,
}


def _suffix(file_path: str) -> str:
    return PurePosixPath(file_path.replace("\\", "/")).suffix.lower()


def detect_language(file_path: str) -> Optional[str]:
    """Detect programming language from file extension, or None."""
    return EXTENSION_TO_LANGUAGE.get(_suffix(file_path))


def grammar_for_path(file_path: str) -> Optional[str]:
    return EXTENSION_TO_GRAMMAR.get(_suffix(file_path))


@lru_cache(maxsize=None)
def get_language(grammar: str) -> Language:
    loader = _GRAMMAR_LOADERS.get(grammar)
    if not loader:
        raise ValueError(f"Unsupported grammar: {grammar}. Supported grammars are: {list(_GRAMMAR_LOADERS.keys())}")
    return Language(loader())
