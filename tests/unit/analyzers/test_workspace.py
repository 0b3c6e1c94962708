import pytest

from codegateway.analyzers import nodes
from codegateway.analyzers.parser_factory import detect_language, grammar_for_path
from codegateway.analyzers.workspace import SourceWorkspace


@pytest.mark.parametrize("path, language", [
    ("a.ts", "typescript"),
    ("a.tsx", "typescript"),
    ("a.js", "javascript"),
    ("a.JSX", "javascript"),
    ("a.mjs", "javascript"),
    ("a.cjs", "javascript"),
    ("a.py", "python"),
    ("a.go", "go"),
    ("a.rs", "rust"),
    ("a.java", "java"),
    ("a.cs", "csharp"),
    ("a.md", None),
    ("Makefile", None),
])
def test_detect_language(path, language):
    assert detect_language(path) == language


def test_tsx_uses_its_own_grammar():
    assert grammar_for_path("view.tsx") == "tsx"
    assert grammar_for_path("view.ts") == "typescript"
    assert grammar_for_path("tool.py") is None


def test_open_registers_and_releases_entry():
    workspace = SourceWorkspace()
    with workspace.open("const answer = compute();\n", "src/a.js") as src:
        assert len(workspace) == 1
        declarators = src.nodes_of_type("variable_declarator")
        assert [src.text(d.child_by_field_name("name")) for d in declarators] == ["answer"]
    assert len(workspace) == 0


def test_entry_released_when_caller_raises():
    workspace = SourceWorkspace()
    with pytest.raises(RuntimeError):
        with workspace.open("run();\n", "src/a.ts"):
            raise RuntimeError("detector failed")
    assert len(workspace) == 0


def test_concurrent_entries_for_same_path_are_distinct():
    workspace = SourceWorkspace()
    with workspace.open("one();\n", "src/a.js") as first:
        with workspace.open("two();\n", "src/a.js") as second:
            assert len(workspace) == 2
            assert first.source != second.source
    assert len(workspace) == 0


def test_unsupported_file_is_rejected():
    with pytest.raises(ValueError):
        with SourceWorkspace().open("x = 1\n", "tool.py"):
            pass


def test_node_helpers():
    source = (
        "class Repo {\n"
        "  async find(id) {\n"
        "    return await db.get(id);\n"
        "  }\n"
        "}\n"
        "const save = function () { return 1; };\n"
    )
    with SourceWorkspace().open(source, "src/repo.js") as src:
        functions = [n for n in src.walk() if nodes.is_function(n)]
        assert len(functions) == 2
        assert functions[0].type == "method_definition"
        assert nodes.function_name(src, functions[0]) == "find"
        assert nodes.function_name(src, functions[1]) == "save"
        assert nodes.is_async(functions[0])
        assert not nodes.is_async(functions[1])

        await_expr = src.nodes_of_type("await_expression")[0]
        assert nodes.enclosing_function(await_expr) == functions[0]
        assert nodes.is_descendant_of(await_expr, functions[0])
        assert not nodes.is_descendant_of(await_expr, functions[1])

        call = src.nodes_of_type("call_expression")[0]
        assert nodes.callee_text(src, call) == "db.get"
        assert [src.text(a) for a in nodes.call_arguments(call)] == ["id"]


def test_truncate_code():
    assert nodes.truncate_code("abcdef", 10) == "abcdef"
    assert nodes.truncate_code("abcdefghij", 8) == "abcde..."
