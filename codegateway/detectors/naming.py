from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from tree_sitter import Node

from codegateway.analyzers import nodes
from codegateway.analyzers.workspace import ParsedSource
from codegateway.config.detectors import DetectorSettings
from codegateway.detectors.base import BaseDetector
from codegateway.models.pattern import PatternRecord, PatternType, Severity

CALLBACK_METHODS = {"map", "filter", "forEach", "reduce", "find", "some", "every"}
CATCH_BINDING_NAMES = {"e", "err", "error"}
UNKNOWN_CONVENTION = "unknown"

_CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")


@dataclass
class Binding:
    """A name introduced by a declaration or a parameter list."""
    name: str
    node: Node
    declaration: Node
    is_parameter: bool = False
    owner: Optional[Node] = None
    in_loop_header: bool = False
    in_array_pattern: bool = False
    destructured: bool = False


def detect_naming_convention(name: str) -> str:
    if "_" in name and name == name.lower():
        return "snake_case"
    if "_" in name and name == name.upper():
        return "SCREAMING_SNAKE_CASE"
    if _CAMEL_CASE.match(name) and name != name.lower():
        return "camelCase"
    if _PASCAL_CASE.match(name):
        return "PascalCase"
    return UNKNOWN_CONVENTION


class NamingDetector(BaseDetector):
    """Flags generic names and mixed naming conventions."""
    id = "naming"
    patterns = [PatternType.GENERIC_VARIABLE_NAME, PatternType.INCONSISTENT_NAMING]

    def analyze(self, source: str, path: str, settings: Optional[DetectorSettings] = None) -> List[PatternRecord]:
        settings = settings or DetectorSettings()
        patterns: List[PatternRecord] = []

        with self.workspace.open(source, path) as src:
            bindings = self._collect_bindings(src)
            patterns.extend(self._analyze_generic_names(src, bindings, settings))
            patterns.extend(self._analyze_naming_consistency(src, bindings))

        return patterns

    # ------------------------------------------------------------------
    # Binding collection
    # ------------------------------------------------------------------
    def _collect_bindings(self, src: ParsedSource) -> List[Binding]:
        bindings: List[Binding] = []

        for node in src.walk():
            if node.type == "variable_declarator":
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    header = self._is_for_header_declaration(node)
                    bindings.extend(self._bindings_from_pattern(src, name_node, node, in_loop_header=header))

            elif node.type == "for_in_statement":
                left = node.child_by_field_name("left")
                # `for (x of xs)` reassigns an existing name; only declarations bind.
                declares = any(child.type in ("const", "let", "var") for child in node.children)
                if left is not None and declares:
                    bindings.extend(self._bindings_from_pattern(src, left, node, in_loop_header=True))

            elif node.type == "catch_clause":
                param = node.child_by_field_name("parameter")
                if param is not None:
                    bindings.extend(self._bindings_from_pattern(src, param, node))

            elif nodes.is_function(node):
                bindings.extend(self._parameter_bindings(src, node))

        return bindings

    def _parameter_bindings(self, src: ParsedSource, func: Node) -> List[Binding]:
        single = func.child_by_field_name("parameter")
        if single is not None:
            params = [single]
        else:
            params_node = func.child_by_field_name("parameters")
            params = params_node.named_children if params_node is not None else []

        bindings = []
        for param in params:
            for binding in self._bindings_from_pattern(src, param, param):
                binding.is_parameter = True
                binding.owner = func
                bindings.append(binding)
        return bindings

    def _bindings_from_pattern(
        self,
        src: ParsedSource,
        pattern: Node,
        declaration: Node,
        in_loop_header: bool = False,
        in_array_pattern: bool = False,
        destructured: bool = False,
    ) -> List[Binding]:
        kind = pattern.type
        if kind in ("identifier", "shorthand_property_identifier_pattern"):
            return [Binding(
                name=src.text(pattern),
                node=pattern,
                declaration=declaration,
                in_loop_header=in_loop_header,
                in_array_pattern=in_array_pattern,
                destructured=destructured,
            )]

        if kind in ("required_parameter", "optional_parameter"):
            children = [pattern.child_by_field_name("pattern")]
        elif kind in ("assignment_pattern", "object_assignment_pattern"):
            children = [pattern.child_by_field_name("left")]
        elif kind == "pair_pattern":
            children = [pattern.child_by_field_name("value")]
        elif kind in ("array_pattern", "object_pattern", "rest_pattern"):
            children = pattern.named_children
            destructured = destructured or kind != "rest_pattern"
            in_array_pattern = in_array_pattern or kind == "array_pattern"
        else:
            return []

        bindings = []
        for child in children:
            if child is None:
                continue
            bindings.extend(self._bindings_from_pattern(
                src, child, declaration, in_loop_header, in_array_pattern, destructured,
            ))
        return bindings

    @staticmethod
    def _is_for_header_declaration(declarator: Node) -> bool:
        statement = declarator.parent
        if statement is None or statement.parent is None:
            return False
        loop = statement.parent
        return loop.type == "for_statement" and loop.child_by_field_name("body") != statement

    # ------------------------------------------------------------------
    # Generic names
    # ------------------------------------------------------------------
    def _analyze_generic_names(
        self, src: ParsedSource, bindings: List[Binding], settings: DetectorSettings
    ) -> List[PatternRecord]:
        patterns = []
        for binding in bindings:
            if not self._is_generic_name(binding.name, settings):
                continue
            if self._is_acceptable_context(src, binding, settings):
                continue

            if binding.is_parameter:
                patterns.append(self._parameter_pattern(src, binding))
            else:
                patterns.append(self._variable_pattern(src, binding))
        return patterns

    def _variable_pattern(self, src: ParsedSource, binding: Binding) -> PatternRecord:
        name = binding.name
        declaration = binding.declaration
        initializer = None
        if declaration.type == "variable_declarator":
            initializer = declaration.child_by_field_name("value")
        snippet_node = declaration if declaration.type == "variable_declarator" else binding.node

        explanation = f'Consider renaming to describe what "{name}" contains. '
        if initializer is not None:
            explanation += f"It's assigned: {src.text(initializer)[:50]}..."

        return self.create_pattern(
            PatternType.GENERIC_VARIABLE_NAME,
            src.path,
            nodes.start_line(binding.node),
            nodes.end_line(snippet_node),
            f'Variable "{name}" is a generic name',
            explanation,
            src.text(snippet_node),
            severity=Severity.WARNING,
            start_column=src.column(binding.node.start_point),
            end_column=src.column(binding.node.end_point),
            suggestion=self._suggest_better_name(src, name, initializer),
            confidence=0.85,
        )

    def _parameter_pattern(self, src: ParsedSource, binding: Binding) -> PatternRecord:
        func_name = nodes.function_name(src, binding.owner) if binding.owner is not None else None
        return self.create_pattern(
            PatternType.GENERIC_VARIABLE_NAME,
            src.path,
            nodes.start_line(binding.declaration),
            nodes.end_line(binding.declaration),
            f'Parameter "{binding.name}" in {func_name or "anonymous function"} is a generic name',
            "Consider a more descriptive name that indicates the parameter's purpose",
            src.text(binding.declaration),
            severity=Severity.WARNING,
            start_column=src.column(binding.node.start_point),
            end_column=src.column(binding.node.end_point),
            confidence=0.8,
        )

    @staticmethod
    def _is_generic_name(name: str, settings: DetectorSettings) -> bool:
        if name.lower() in settings.generic_names:
            return True
        return (
            len(name) == 1
            and name not in settings.loop_names
            and name not in settings.coordinate_names
        )

    def _is_acceptable_context(self, src: ParsedSource, binding: Binding, settings: DetectorSettings) -> bool:
        name = binding.name

        if binding.in_loop_header:
            return True
        if name in settings.loop_names and nodes.first_ancestor(binding.node, nodes.LOOP_HEADER_NODES):
            return True

        if name in settings.coordinate_names:
            return True

        if name.lower() in CATCH_BINDING_NAMES and nodes.first_ancestor(binding.node, ("catch_clause",)):
            return True

        if binding.in_array_pattern and len(name) == 1:
            return True

        if binding.is_parameter and self._is_iteration_callback(src, binding.owner):
            return True

        return False

    @staticmethod
    def _is_iteration_callback(src: ParsedSource, func: Optional[Node]) -> bool:
        if func is None or func.type not in ("arrow_function", "function_expression", "function"):
            return False
        args = func.parent
        if args is None or args.type != "arguments":
            return False
        call = args.parent
        if call is None or call.type != "call_expression":
            return False
        callee = call.child_by_field_name("function")
        if callee is None or callee.type != "member_expression":
            return False
        return src.text(callee.child_by_field_name("property")) in CALLBACK_METHODS

    @staticmethod
    def _suggest_better_name(src: ParsedSource, name: str, initializer: Optional[Node]) -> str:
        if initializer is not None:
            if initializer.type == "call_expression":
                func_name = nodes.callee_text(src, initializer)
                if func_name.startswith("get"):
                    return f"Consider: {func_name.replace('get', '', 1).lower()} or {func_name}Result"
                if func_name.startswith("fetch"):
                    return f"Consider: {func_name.replace('fetch', '', 1).lower()} or {func_name}Response"
                return f"Consider naming based on what {func_name}() returns"

            if initializer.type == "await_expression" and initializer.named_children:
                inner = initializer.named_children[0]
                if inner.type == "call_expression":
                    return f"Consider naming based on the async operation: {nodes.callee_text(src, inner)}"

        return f"Consider a name that describes the purpose or content of this {name}"

    # ------------------------------------------------------------------
    # Naming consistency
    # ------------------------------------------------------------------
    def _analyze_naming_consistency(self, src: ParsedSource, bindings: List[Binding]) -> List[PatternRecord]:
        identifiers = [
            (binding, detect_naming_convention(binding.name))
            for binding in bindings
            if not binding.is_parameter and not binding.destructured
        ]

        # Insertion order makes the first-seen convention win ties.
        counts: Dict[str, int] = {}
        for _, convention in identifiers:
            if convention != UNKNOWN_CONVENTION:
                counts[convention] = counts.get(convention, 0) + 1

        if len(counts) <= 1:
            return []

        dominant = ""
        max_count = 0
        for convention, count in counts.items():
            if count > max_count:
                dominant, max_count = convention, count

        patterns = []
        for binding, convention in identifiers:
            if convention in (UNKNOWN_CONVENTION, dominant):
                continue
            line = nodes.start_line(binding.node)
            patterns.append(self.create_pattern(
                PatternType.INCONSISTENT_NAMING,
                src.path,
                line,
                line,
                f'Variable "{binding.name}" uses {convention} but file predominantly uses {dominant}',
                "Consistent naming conventions improve code readability. "
                f"Consider renaming to match the {dominant} convention used elsewhere.",
                binding.name,
                severity=Severity.INFO,
                confidence=0.7,
            ))
        return patterns
