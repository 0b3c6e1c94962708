"""Helpers over tree-sitter JavaScript/TypeScript nodes."""
from typing import Iterable, List, Optional

from tree_sitter import Node

from codegateway.analyzers.workspace import ParsedSource

FUNCTION_NODES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
}

LOOP_HEADER_NODES = {"for_statement", "for_in_statement"}


def is_function(node: Node) -> bool:
    # The anonymous `function` keyword token shares a type name with old grammars' function expressions.
    return node.is_named and node.type in FUNCTION_NODES


def start_line(node: Node) -> int:
    return node.start_point[0] + 1


def end_line(node: Node) -> int:
    return node.end_point[0] + 1


def first_ancestor(node: Node, types: Iterable[str]) -> Optional[Node]:
    wanted = set(types)
    current = node.parent
    while current is not None:
        if current.type in wanted:
            return current
        current = current.parent
    return None


def enclosing_function(node: Node) -> Optional[Node]:
    current = node.parent
    while current is not None:
        if is_function(current):
            return current
        current = current.parent
    return None


def is_descendant_of(node: Node, ancestor: Node) -> bool:
    current = node
    while current is not None:
        if current == ancestor:
            return True
        current = current.parent
    return False


def is_async(func: Node) -> bool:
    return any(child.type == "async" for child in func.children)


def statements(block: Node) -> List[Node]:
    """Named children of a statement block, comments excluded."""
    return [child for child in block.named_children if child.type != "comment"]


def function_name(src: ParsedSource, func: Node) -> Optional[str]:
    if func.type in ("function_declaration", "generator_function_declaration", "method_definition"):
        name = func.child_by_field_name("name")
        return src.text(name) if name is not None else None
    declarator = first_ancestor(func, ("variable_declarator",))
    if declarator is not None:
        name = declarator.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            return src.text(name)
    return None


def callee_text(src: ParsedSource, call: Node) -> str:
    field = "constructor" if call.type == "new_expression" else "function"
    return src.text(call.child_by_field_name(field))


def call_arguments(call: Node) -> List[Node]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return []
    return [child for child in args.named_children if child.type != "comment"]


def string_value(src: ParsedSource, node: Node) -> str:
    """Literal text of a `string` node without its quotes."""
    return src.text(node)[1:-1]


def truncate_code(code: str, max_length: int) -> str:
    if len(code) <= max_length:
        return code
    return f"{code[:max_length - 3]}..."
