import re
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from tree_sitter import Node, Parser, Tree

from codegateway.analyzers.parser_factory import get_language, grammar_for_path


class ParsedSource:
    """One parsed file: the tree plus the text views detectors need."""

    def __init__(self, path: str, source: str, grammar: str, tree: Tree):
        self.path = path
        self.source = source
        self.grammar = grammar
        self.tree = tree
        self._source_bytes = source.encode("utf8")
        self.lines: List[str] = re.split(r"\r?\n", source)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def column(self, point: Tuple[int, int]) -> int:
        """Turns a tree-sitter (row, byte offset) point into a 1-based character column."""
        row, byte_offset = point
        line = self.lines[row] if row < len(self.lines) else ""
        return len(line.encode("utf8")[:byte_offset].decode("utf8", errors="ignore")) + 1

    def text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self._source_bytes[node.start_byte:node.end_byte].decode("utf8", errors="replace")

    def text_span(self, start: Node, end: Node) -> str:
        return self._source_bytes[start.start_byte:end.end_byte].decode("utf8", errors="replace")

    def walk(self, node: Optional[Node] = None) -> Iterator[Node]:
        """Pre-order walk over `node` (default: the whole tree), node included."""
        stack = [node if node is not None else self.root]
        while stack:
            n = stack.pop()
            yield n
            stack.extend(reversed(n.children))

    def descendants(self, node: Node, types: Iterable[str]) -> List[Node]:
        wanted = set(types)
        return [n for n in self.walk(node) if n != node and n.type in wanted]

    def nodes_of_type(self, *types: str) -> List[Node]:
        wanted = set(types)
        return [n for n in self.walk() if n.type in wanted]


class SourceWorkspace:
    """
    Shared parse workspace owned by a detector.

    Each `open()` registers a transient file entry with its own tree-sitter
    parser and removes it when the block exits, whether or not the caller
    raised. Grammar objects are shared; parsers and trees are not.
    """

    def __init__(self):
        self._entries: Dict[str, ParsedSource] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @contextmanager
    def open(self, source: str, path: str) -> Iterator[ParsedSource]:
        grammar = grammar_for_path(path)
        if grammar is None:
            raise ValueError(f"No JavaScript/TypeScript grammar for file: {path}")

        parser = Parser(get_language(grammar))
        tree = parser.parse(source.encode("utf8"))
        entry = ParsedSource(path, source, grammar, tree)
        key = f"{path}#{uuid.uuid4().hex}"

        with self._lock:
            self._entries[key] = entry
        try:
            yield entry
        finally:
            with self._lock:
                self._entries.pop(key, None)
