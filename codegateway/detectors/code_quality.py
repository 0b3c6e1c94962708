from __future__ import annotations
import math
import re
from typing import List, Optional, Union

from tree_sitter import Node

from codegateway.analyzers import nodes
from codegateway.analyzers.workspace import ParsedSource
from codegateway.config.detectors import DetectorSettings
from codegateway.detectors.base import BaseDetector
from codegateway.models.pattern import PatternRecord, PatternType, Severity

ACCEPTABLE_NUMBERS = {0, 1, 2, -1, 100, 1000, 60, 24, 365}
ROUND_NUMBERS = {100, 1000, 10000}

COMPLEXITY_THRESHOLD = 10
CRITICAL_COMPLEXITY = 20

# Function-like nodes whose complexity and bodies are inspected.
QUALITY_FUNCTION_NODES = {
    "function_declaration",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
}

DECISION_NODES = {
    "if_statement",
    "ternary_expression",
    "for_statement",
    "for_in_statement",
    "while_statement",
    "do_statement",
    "switch_case",
    "catch_clause",
}
LOGICAL_OPERATORS = {"&&", "||"}

TODO_COMMENT = re.compile(r"\b(TODO|FIXME|XXX|HACK|BUG)\b:?\s*(.*)", re.IGNORECASE)
VAGUE_TODO = re.compile(
    r"^\s*(fix|do|implement|add|remove|update|change|handle|check)\s*(this|it|later)?\s*$", re.IGNORECASE
)
MIN_TODO_CONTEXT = 10

COMMENTED_CODE_PATTERNS = [
    re.compile(r"^\s*//\s*(const|let|var|function|class|if|for|while|return|import|export)\s"),
    re.compile(r"^\s*//\s*[a-zA-Z_$][a-zA-Z0-9_$]*\s*[=(\[{]"),
    re.compile(r"^\s*//\s*[)}\]];?$"),
    re.compile(r"^\s*//\s*\.[a-zA-Z]+\("),
    re.compile(r"^\s*//\s*(await|async)\s"),
]
MIN_COMMENTED_RUN = 3

NOT_IMPLEMENTED = re.compile(r"""throw\s+new\s+Error\s*\(\s*['"]not\s*implemented""", re.IGNORECASE)
TODO_IMPLEMENT = re.compile(r"//\s*TODO\s*:?\s*(implement|add|fix|complete)", re.IGNORECASE)
DESCRIPTIVE_CONST_NAME = re.compile(r"[A-Z_]")


def parse_number(text: str) -> Optional[Union[int, float]]:
    """Numeric value of a JavaScript number literal, or None if it cannot be read."""
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    try:
        return int(cleaned, 0)
    except ValueError:
        pass
    try:
        return float(cleaned)
    except ValueError:
        return None


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_magic_number(value: Union[int, float]) -> bool:
    if value in ACCEPTABLE_NUMBERS:
        return False
    if 2 < value < 100:
        return not math.log10(value).is_integer()
    return value >= 100 and value not in ROUND_NUMBERS


def cyclomatic_complexity(src: ParsedSource, func: Node) -> int:
    complexity = 1
    for node in src.walk(func):
        if node == func:
            continue
        if node.type in DECISION_NODES:
            complexity += 1
        elif node.type == "binary_expression":
            operator = node.child_by_field_name("operator")
            if operator is not None and operator.type in LOGICAL_OPERATORS:
                complexity += 1
    return complexity


class CodeQualityDetector(BaseDetector):
    """Flags maintainability smells: magic numbers, vague TODOs, dead code, complexity and stubs."""
    id = "code_quality"
    patterns = [
        PatternType.MAGIC_NUMBER,
        PatternType.TODO_WITHOUT_CONTEXT,
        PatternType.COMMENTED_OUT_CODE,
        PatternType.OVERLY_COMPLEX_FUNCTION,
        PatternType.PLACEHOLDER_IMPLEMENTATION,
    ]

    def analyze(self, source: str, path: str, settings: Optional[DetectorSettings] = None) -> List[PatternRecord]:
        patterns: List[PatternRecord] = []

        with self.workspace.open(source, path) as src:
            patterns.extend(self._detect_magic_numbers(src))
            patterns.extend(self._detect_todo_without_context(src))
            patterns.extend(self._detect_commented_out_code(src))
            functions = [n for n in src.walk() if n.type in QUALITY_FUNCTION_NODES]
            patterns.extend(self._detect_complex_functions(src, functions))
            patterns.extend(self._detect_placeholder_implementations(src, functions))

        return patterns

    def _detect_magic_numbers(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []

        for literal in src.nodes_of_type("number"):
            value = parse_number(src.text(literal))
            if value is None or not is_magic_number(value):
                continue
            if self._is_exempt_number(src, literal):
                continue

            parent = literal.parent
            snippet = src.text(parent) if parent is not None else src.text(literal)
            shown = format_number(value)
            patterns.append(self.create_pattern(
                PatternType.MAGIC_NUMBER,
                src.path,
                nodes.start_line(literal),
                nodes.end_line(literal),
                f"Magic number {shown} without explanation",
                "Magic numbers make code harder to understand and maintain. "
                "Consider extracting to a named constant that explains its purpose.",
                snippet,
                severity=Severity.INFO,
                suggestion=f"const DESCRIPTIVE_NAME = {shown}; // Add explanation here",
                confidence=0.6,
            ))

        return patterns

    @staticmethod
    def _is_exempt_number(src: ParsedSource, literal: Node) -> bool:
        parent = literal.parent
        if parent is not None and parent.type in ("subscript_expression", "pair"):
            return True

        declarator = nodes.first_ancestor(literal, ("variable_declarator",))
        if declarator is not None:
            statement = declarator.parent
            is_const = statement is not None and statement.type == "lexical_declaration" and any(
                child.type == "const" for child in statement.children
            )
            if is_const:
                name = src.text(declarator.child_by_field_name("name"))
                if len(name) > 3 or DESCRIPTIVE_CONST_NAME.search(name):
                    return True

        return nodes.first_ancestor(literal, ("switch_case",)) is not None

    def _detect_todo_without_context(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []

        for index, line in enumerate(src.lines):
            match = TODO_COMMENT.search(line)
            if not match:
                continue

            todo_type = match.group(1).upper()
            context = match.group(2).strip()
            has_context = len(context) > MIN_TODO_CONTEXT and not VAGUE_TODO.match(context)
            if has_context:
                continue

            patterns.append(self.create_pattern(
                PatternType.TODO_WITHOUT_CONTEXT,
                src.path,
                index + 1,
                index + 1,
                f"{todo_type} comment lacks sufficient context",
                "TODO comments should explain what needs to be done and why. "
                "Include enough detail that you (or someone else) can act on it later.",
                line.strip(),
                severity=Severity.INFO,
                suggestion=f"{todo_type}: [What needs to be done] - [Why] - [Any relevant context or links]",
                confidence=0.7,
            ))

        return patterns

    def _detect_commented_out_code(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []
        run: List[str] = []
        run_start = 0

        def flush(end_line: int) -> None:
            if len(run) >= MIN_COMMENTED_RUN:
                snippet = "\n".join(run[:3]) + ("\n// ..." if len(run) > 3 else "")
                patterns.append(self.create_pattern(
                    PatternType.COMMENTED_OUT_CODE,
                    src.path,
                    run_start,
                    end_line,
                    f"{len(run)} lines of commented-out code",
                    "Large blocks of commented-out code clutter the codebase and create confusion. "
                    "If the code is no longer needed, delete it - it's preserved in version control.",
                    snippet,
                    severity=Severity.INFO,
                    suggestion="Delete commented-out code - use version control to recover it if needed",
                    confidence=0.65,
                ))
            run.clear()

        for index, line in enumerate(src.lines):
            if any(p.search(line) for p in COMMENTED_CODE_PATTERNS):
                if not run:
                    run_start = index + 1
                run.append(line.strip())
            else:
                # The run ended on the previous line, which is line `index` in 1-based numbering.
                flush(index)

        flush(len(src.lines))
        return patterns

    def _detect_complex_functions(self, src: ParsedSource, functions: List[Node]) -> List[PatternRecord]:
        patterns = []

        for func in functions:
            complexity = cyclomatic_complexity(src, func)
            if complexity <= COMPLEXITY_THRESHOLD:
                continue

            name = nodes.function_name(src, func)
            label = f' "{name}"' if name else ""
            patterns.append(self.create_pattern(
                PatternType.OVERLY_COMPLEX_FUNCTION,
                src.path,
                nodes.start_line(func),
                nodes.end_line(func),
                f"Function{label} has cyclomatic complexity of {complexity}",
                f"High complexity (>{COMPLEXITY_THRESHOLD}) makes code harder to understand, test, and maintain. "
                "Consider breaking it into smaller functions.",
                nodes.truncate_code(src.text(func), 200),
                severity=Severity.CRITICAL if complexity > CRITICAL_COMPLEXITY else Severity.WARNING,
                suggestion="Extract logical branches into separate functions with descriptive names",
                confidence=0.85,
            ))

        return patterns

    def _detect_placeholder_implementations(self, src: ParsedSource, functions: List[Node]) -> List[PatternRecord]:
        patterns = []

        for func in functions:
            body = func.child_by_field_name("body")
            if body is None:
                continue
            body_text = src.text(body)

            if NOT_IMPLEMENTED.search(body_text):
                patterns.append(self.create_pattern(
                    PatternType.PLACEHOLDER_IMPLEMENTATION,
                    src.path,
                    nodes.start_line(func),
                    nodes.end_line(func),
                    'Function throws "not implemented" - placeholder code',
                    "This function has a placeholder implementation that will fail at runtime. "
                    "Complete the implementation or remove it if it's not needed.",
                    nodes.truncate_code(src.text(func), 200),
                    severity=Severity.CRITICAL,
                    suggestion="Implement the function or remove it",
                    confidence=0.95,
                ))
                continue

            if TODO_IMPLEMENT.search(body_text):
                patterns.append(self.create_pattern(
                    PatternType.PLACEHOLDER_IMPLEMENTATION,
                    src.path,
                    nodes.start_line(func),
                    nodes.end_line(func),
                    "Function has TODO indicating incomplete implementation",
                    "This function contains a TODO suggesting it needs more work. "
                    "Review and complete before committing.",
                    nodes.truncate_code(src.text(func), 200),
                    severity=Severity.WARNING,
                    suggestion="Complete the TODO or add a detailed explanation of what remains",
                    confidence=0.75,
                ))

            if body.type != "statement_block" or nodes.statements(body):
                continue
            if self._is_intentional_noop(func):
                continue

            name = nodes.function_name(src, func)
            label = f' "{name}"' if name else ""
            patterns.append(self.create_pattern(
                PatternType.PLACEHOLDER_IMPLEMENTATION,
                src.path,
                nodes.start_line(func),
                nodes.end_line(func),
                f"Function{label} has empty body",
                "This function does nothing. Either implement it or remove it.",
                src.text(func),
                severity=Severity.WARNING,
                suggestion="Add implementation or remove the function",
                confidence=0.8,
            ))

        return patterns

    @staticmethod
    def _is_intentional_noop(func: Node) -> bool:
        """Empty arrows passed as call arguments or object property values."""
        if func.type != "arrow_function":
            return False
        parent = func.parent
        if parent is None:
            return False
        if parent.type == "pair":
            return True
        return parent.type == "arguments" and parent.parent is not None and parent.parent.type in (
            "call_expression", "new_expression",
        )
