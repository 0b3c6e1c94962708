from __future__ import annotations
from typing import Iterator, List, Optional

from tree_sitter import Node

from codegateway.analyzers import nodes
from codegateway.analyzers.workspace import ParsedSource
from codegateway.config.detectors import DetectorSettings
from codegateway.detectors.base import BaseDetector
from codegateway.models.pattern import PatternRecord, PatternType, Severity

# Strings shorter than this are matched by substring against the phrase list.
SHORT_MESSAGE_LENGTH = 30
MAX_BOUNDARY_SPAN = 10


class ErrorHandlingDetector(BaseDetector):
    """Flags catch blocks and async code that lose or hide errors."""
    id = "error_handling"
    patterns = [
        PatternType.EMPTY_CATCH_BLOCK,
        PatternType.SWALLOWED_ERROR,
        PatternType.MISSING_ERROR_BOUNDARY,
        PatternType.GENERIC_ERROR_MESSAGE,
        PatternType.TRY_WITHOUT_CATCH,
    ]

    def analyze(self, source: str, path: str, settings: Optional[DetectorSettings] = None) -> List[PatternRecord]:
        settings = settings or DetectorSettings()
        patterns: List[PatternRecord] = []

        with self.workspace.open(source, path) as src:
            patterns.extend(self._detect_empty_catch_blocks(src))
            patterns.extend(self._detect_swallowed_errors(src))
            patterns.extend(self._detect_try_without_catch(src))
            patterns.extend(self._detect_missing_error_boundaries(src))
            patterns.extend(self._detect_generic_error_messages(src, settings))

        return patterns

    def _detect_empty_catch_blocks(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []
        for catch_clause in src.nodes_of_type("catch_clause"):
            body = catch_clause.child_by_field_name("body")
            if body is None or not self._is_effectively_empty(body):
                continue

            error_param = self._catch_binding_name(src, catch_clause) or "error"
            patterns.append(self.create_pattern(
                PatternType.EMPTY_CATCH_BLOCK,
                src.path,
                nodes.start_line(catch_clause),
                nodes.end_line(catch_clause),
                "Empty catch block silently swallows errors",
                "Empty catch blocks hide errors and make debugging extremely difficult. "
                "At minimum, log the error or add a comment explaining why it's intentionally ignored.",
                src.text(catch_clause),
                severity=Severity.CRITICAL,
                suggestion=(
                    f"catch ({error_param}) {{\n"
                    f"  console.error('Operation failed:', {error_param});\n"
                    f"  throw {error_param}; // or handle appropriately\n"
                    "}"
                ),
                confidence=0.95,
                auto_fix_available=True,
            ))
        return patterns

    def _detect_swallowed_errors(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []
        for catch_clause in src.nodes_of_type("catch_clause"):
            body = catch_clause.child_by_field_name("body")
            error_param = self._catch_binding_name(src, catch_clause)

            # Empty bodies are reported as empty_catch_block instead.
            if body is None or not error_param or self._is_effectively_empty(body):
                continue

            used = any(
                src.text(identifier) == error_param
                for identifier in src.descendants(body, ("identifier", "shorthand_property_identifier"))
            )
            if used:
                continue

            patterns.append(self.create_pattern(
                PatternType.SWALLOWED_ERROR,
                src.path,
                nodes.start_line(catch_clause),
                nodes.end_line(catch_clause),
                f'Caught error "{error_param}" is never used',
                "The error is caught but never logged, rethrown, or otherwise handled. "
                "This can hide important error information.",
                src.text(catch_clause),
                severity=Severity.WARNING,
                suggestion=f"Consider logging the error: console.error('Operation failed:', {error_param});",
                confidence=0.85,
            ))
        return patterns

    def _detect_try_without_catch(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []
        for node in src.walk():
            if node.type == "try_statement":
                has_catch = node.child_by_field_name("handler") is not None
                has_finally = node.child_by_field_name("finalizer") is not None
                try_block = node.child_by_field_name("body")
                start = node
            elif node.type == "ERROR" and any(child.type == "try" for child in node.children):
                # Parse recovery for `try { ... }` with no handler at all.
                has_catch = any(child.type == "catch_clause" for child in node.children)
                has_finally = any(child.type == "finally_clause" for child in node.children)
                try_block = None
                start = next(child for child in node.children if child.type == "try")
            else:
                continue

            if not has_catch and not has_finally:
                patterns.append(self.create_pattern(
                    PatternType.EMPTY_CATCH_BLOCK,
                    src.path,
                    nodes.start_line(start),
                    nodes.end_line(node),
                    "try block without catch or finally - syntax error",
                    "A try block must have either a catch clause, a finally clause, or both. "
                    "This code will fail to parse at runtime.",
                    nodes.truncate_code(src.text_span(start, node), 200),
                    severity=Severity.CRITICAL,
                    suggestion="Add a catch clause to handle errors, or a finally clause for cleanup",
                    confidence=1.0,
                ))
                continue

            if has_catch or try_block is None:
                continue

            can_fail = src.descendants(try_block, ("await_expression", "throw_statement", "call_expression"))
            if can_fail:
                patterns.append(self.create_pattern(
                    PatternType.TRY_WITHOUT_CATCH,
                    src.path,
                    nodes.start_line(node),
                    nodes.end_line(node),
                    "try...finally without catch - errors will propagate",
                    "This try block has a finally clause but no catch. Errors will propagate to the caller. "
                    "This is valid for cleanup patterns, but consider if errors should be handled here.",
                    nodes.truncate_code(src.text(node), 200),
                    severity=Severity.INFO,
                    suggestion=(
                        "Add a catch clause if errors should be handled at this level, "
                        "or document why propagation is intended"
                    ),
                    confidence=0.6,
                ))
        return patterns

    def _detect_missing_error_boundaries(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []
        for func in src.walk():
            if not nodes.is_function(func) or not nodes.is_async(func):
                continue
            body = func.child_by_field_name("body")
            if body is None:
                continue

            own_nodes = list(self._own_nodes(body))
            awaits = [n for n in own_nodes if n.type == "await_expression"]
            if not awaits:
                continue

            try_blocks = [
                n.child_by_field_name("body")
                for n in own_nodes
                if n.type == "try_statement" and n.child_by_field_name("body") is not None
            ]
            unprotected = [
                await_expr for await_expr in awaits
                if not any(nodes.is_descendant_of(await_expr, block) for block in try_blocks)
            ]
            if not unprotected:
                continue

            func_name = nodes.function_name(src, func)
            label = f' "{func_name}"' if func_name else ""
            start = nodes.start_line(func)
            patterns.append(self.create_pattern(
                PatternType.MISSING_ERROR_BOUNDARY,
                src.path,
                start,
                min(nodes.end_line(func), start + MAX_BOUNDARY_SPAN),
                f"Async function{label} has unhandled promise rejections",
                f"This async function has {len(unprotected)} await expression(s) without error handling. "
                "Unhandled rejections can crash your application or cause silent failures.",
                nodes.truncate_code(src.text(func), 300),
                severity=Severity.WARNING,
                suggestion="Wrap await calls in try-catch or add .catch() handler",
                confidence=0.75,
            ))
        return patterns

    def _detect_generic_error_messages(self, src: ParsedSource, settings: DetectorSettings) -> List[PatternRecord]:
        patterns = []
        for literal in src.nodes_of_type("string"):
            text = nodes.string_value(src, literal).lower()
            is_generic = any(
                text == message or (len(text) < SHORT_MESSAGE_LENGTH and message in text)
                for message in settings.error_messages
            )
            if not is_generic or not self._is_in_error_context(src, literal):
                continue

            patterns.append(self.create_pattern(
                PatternType.GENERIC_ERROR_MESSAGE,
                src.path,
                nodes.start_line(literal),
                nodes.end_line(literal),
                "Generic error message provides no debugging context",
                "Error messages should describe what operation failed and why. "
                "Generic messages make debugging difficult.",
                src.text(literal),
                severity=Severity.INFO,
                start_column=src.column(literal.start_point),
                end_column=src.column(literal.end_point),
                suggestion="Include operation name, input values, and specific failure reason",
                confidence=0.7,
            ))
        return patterns

    @staticmethod
    def _is_effectively_empty(block: Node) -> bool:
        return not nodes.statements(block)

    @staticmethod
    def _catch_binding_name(src: ParsedSource, catch_clause: Node) -> Optional[str]:
        param = catch_clause.child_by_field_name("parameter")
        if param is None or param.type != "identifier":
            return None
        return src.text(param)

    @staticmethod
    def _own_nodes(body: Node) -> Iterator[Node]:
        """Walks a function body without entering nested functions."""
        stack = [body]
        while stack:
            n = stack.pop()
            yield n
            stack.extend(child for child in reversed(n.children) if not nodes.is_function(child))

    @staticmethod
    def _is_in_error_context(src: ParsedSource, node: Node) -> bool:
        if nodes.first_ancestor(node, ("throw_statement",)):
            return True

        new_expr = nodes.first_ancestor(node, ("new_expression",))
        if new_expr is not None and nodes.callee_text(src, new_expr).endswith("Error"):
            return True

        if nodes.first_ancestor(node, ("catch_clause",)):
            return True

        call = nodes.first_ancestor(node, ("call_expression",))
        if call is not None and nodes.callee_text(src, call) == "reject":
            return True

        return False
