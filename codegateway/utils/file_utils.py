from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pathspec
from gitignore_parser import parse_gitignore

from codegateway.analyzers.parser_factory import EXTENSION_TO_GRAMMAR

SOURCE_EXTENSIONS = frozenset(EXTENSION_TO_GRAMMAR)


@lru_cache(maxsize=64)
def _exclude_spec(patterns: Tuple[str, ...]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitignore", patterns)


def matches_glob(file_path: str, patterns: Iterable[str]) -> bool:
    """
    Checks a path against exclusion globs using gitignore wildcard rules.

    A pattern without `/` matches at any depth; `**` crosses directories.
    """
    normalized = file_path.replace("\\", "/")
    return _exclude_spec(tuple(patterns)).match_file(normalized)


def is_source_file(file_path: Path) -> bool:
    return file_path.suffix.lower() in SOURCE_EXTENSIONS


def scan_directory(path: str, exclude_patterns: Optional[List[str]] = None) -> List[Path]:
    """
    Scans a directory recursively, filtering files based on .gitignore rules
    and exclude patterns.
    """
    base_dir = Path(path)
    gitignore_path = base_dir / ".gitignore"

    matches = None
    if gitignore_path.is_file():
        matches = parse_gitignore(str(gitignore_path), base_dir=str(base_dir.resolve()))

    filtered_files = []
    for file_path in sorted(base_dir.rglob("*")):
        if not file_path.is_file():
            continue

        if matches and matches(str(file_path.resolve())):
            continue

        relative = file_path.relative_to(base_dir).as_posix()
        if exclude_patterns and matches_glob(relative, exclude_patterns):
            continue

        filtered_files.append(file_path)

    return filtered_files


def collect_source_files(paths: Iterable[str], exclude_patterns: Optional[List[str]] = None) -> List[Path]:
    """Expands files and directories into the JavaScript/TypeScript files beneath them."""
    collected: List[Path] = []
    seen = set()
    for raw in paths:
        target = Path(raw)
        if target.is_file():
            candidates = [target] if is_source_file(target) else []
        else:
            candidates = [f for f in scan_directory(raw, exclude_patterns) if is_source_file(f)]
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                collected.append(candidate)
    return collected
