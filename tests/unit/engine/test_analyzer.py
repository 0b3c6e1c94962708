import asyncio
from types import SimpleNamespace

import pytest

from codegateway.config.engine import ResolvedConfig
from codegateway.detectors import BaseDetector, ErrorHandlingDetector, SecurityDetector
from codegateway.engine.analyzer import Analyzer
from codegateway.models.pattern import PatternType, Severity

MIXED_SOURCE = """\
const data = load();
try {
  run();
} catch (e) {}
let t = 42;
"""


class ExplodingDetector(BaseDetector):
    id = "exploding"
    patterns = [PatternType.MAGIC_NUMBER]

    def analyze(self, source, path, settings=None):
        raise RuntimeError("boom")


def analyze(analyzer, source, path, **options):
    return asyncio.run(analyzer.analyze_file(source, path, **options))


def signature(result):
    return [(p.type, p.severity, p.location.start_line, p.description) for p in result.patterns]


def test_analysis_is_deterministic():
    analyzer = Analyzer()
    first = analyze(analyzer, MIXED_SOURCE, "src/app.js")
    second = analyze(analyzer, MIXED_SOURCE, "src/app.js")

    assert first.patterns
    assert signature(first) == signature(second)


def test_result_metadata():
    result = analyze(Analyzer(), MIXED_SOURCE, "src/app.ts")

    assert result.file == "src/app.ts"
    assert result.language == "typescript"
    assert result.duration_ms >= 0


def test_patterns_sorted_by_severity_then_line():
    result = analyze(Analyzer(), MIXED_SOURCE, "src/app.js")
    keys = [(-p.severity.rank, p.location.start_line) for p in result.patterns]

    assert keys == sorted(keys)
    assert result.patterns[0].type == PatternType.EMPTY_CATCH_BLOCK


def test_excluded_path_short_circuits():
    result = analyze(Analyzer(), MIXED_SOURCE, "node_modules/pkg/index.js")

    assert result.patterns == []
    assert result.language == "javascript"


def test_unsupported_language_yields_no_patterns():
    result = analyze(Analyzer(), "data = None\n", "tools/build.py")

    assert result.language == "python"
    assert result.patterns == []


def test_unknown_extension_yields_no_language():
    result = analyze(Analyzer(), MIXED_SOURCE, "notes/readme.md")

    assert result.language is None
    assert result.patterns == []


def test_severity_override_only_touches_its_type():
    config = ResolvedConfig(severity_overrides={PatternType.EMPTY_CATCH_BLOCK: Severity.INFO})
    result = analyze(Analyzer(config), MIXED_SOURCE, "src/app.js")

    empty = [p for p in result.patterns if p.type == PatternType.EMPTY_CATCH_BLOCK]
    generic = [p for p in result.patterns if p.type == PatternType.GENERIC_VARIABLE_NAME]
    assert [p.severity for p in empty] == [Severity.INFO]
    assert generic and all(p.severity == Severity.WARNING for p in generic)


def test_severity_filter_runs_before_overrides():
    config = ResolvedConfig(
        min_severity=Severity.WARNING,
        severity_overrides={
            PatternType.MAGIC_NUMBER: Severity.CRITICAL,
            PatternType.EMPTY_CATCH_BLOCK: Severity.INFO,
        },
    )
    result = analyze(Analyzer(config), MIXED_SOURCE, "src/app.js")
    types = [p.type for p in result.patterns]

    assert PatternType.MAGIC_NUMBER not in types
    assert PatternType.EMPTY_CATCH_BLOCK in types


def test_min_severity_argument_beats_config():
    result = analyze(Analyzer(), MIXED_SOURCE, "src/app.js", min_severity=Severity.CRITICAL)

    assert result.patterns
    assert all(p.severity == Severity.CRITICAL for p in result.patterns)


def test_pattern_types_select_detectors():
    source = MIXED_SOURCE + "eval(input);\n"
    result = analyze(Analyzer(), source, "src/app.js", pattern_types=[PatternType.UNSAFE_EVAL])

    assert {p.detector_id for p in result.patterns} == {"security"}


def test_disabled_patterns_skip_detectors():
    config = ResolvedConfig(enabled_patterns=list(SecurityDetector.patterns))
    result = analyze(Analyzer(config), MIXED_SOURCE + "eval(input);\n", "src/app.js")

    assert {p.type for p in result.patterns} == {PatternType.UNSAFE_EVAL}


def test_failing_detector_does_not_affect_others():
    analyzer = Analyzer(detectors=[ExplodingDetector(), ErrorHandlingDetector()])
    result = analyze(analyzer, MIXED_SOURCE, "src/app.js")

    assert [p.type for p in result.patterns] == [PatternType.EMPTY_CATCH_BLOCK]


def test_per_call_config_mapping_is_layered():
    analyzer = Analyzer()
    result = analyze(analyzer, MIXED_SOURCE, "src/app.js", config={"minSeverity": "critical"})

    assert all(p.severity == Severity.CRITICAL for p in result.patterns)
    assert analyzer.config.min_severity == Severity.INFO


def test_update_config():
    analyzer = Analyzer()
    analyzer.update_config(exclude=["src/**"])

    assert analyze(analyzer, MIXED_SOURCE, "src/app.js").patterns == []


def test_analyze_files_accepts_pairs_and_objects():
    analyzer = Analyzer()
    files = [
        ("src/a.js", "try { run(); } catch (e) {}\n"),
        SimpleNamespace(path="src/b.ts", content="eval(input);\n"),
    ]
    results = asyncio.run(analyzer.analyze_files(files, min_severity=Severity.CRITICAL))

    assert [r.file for r in results] == ["src/a.js", "src/b.ts"]
    assert [p.type for p in results[0].patterns] == [PatternType.EMPTY_CATCH_BLOCK]
    assert [p.type for p in results[1].patterns] == [PatternType.UNSAFE_EVAL]


def test_summarize():
    analyzer = Analyzer()
    results = asyncio.run(analyzer.analyze_files([
        ("src/a.js", MIXED_SOURCE),
        ("node_modules/x/index.js", MIXED_SOURCE),
    ]))
    summary = analyzer.summarize(results)

    assert summary.total_files == 2
    assert summary.total_patterns == len(results[0].patterns)
    assert set(summary.by_severity) == set(Severity)
    assert sum(summary.by_severity.values()) == summary.total_patterns
    assert summary.by_type[PatternType.EMPTY_CATCH_BLOCK] == 1


def test_summarize_empty():
    summary = Analyzer().summarize([])

    assert summary.total_patterns == 0
    assert summary.by_severity == {Severity.INFO: 0, Severity.WARNING: 0, Severity.CRITICAL: 0}


def test_workspaces_are_released():
    analyzer = Analyzer()
    analyze(analyzer, MIXED_SOURCE, "src/app.js")

    assert all(len(detector.workspace) == 0 for detector in analyzer.detectors)


@pytest.mark.parametrize("path", ["src/app.jsx", "src/app.mjs", "src/app.cjs", "src/view.tsx"])
def test_all_script_extensions_are_analyzed(path):
    result = analyze(Analyzer(), "try { run(); } catch (e) {}\n", path)

    assert [p.type for p in result.patterns] == [PatternType.EMPTY_CATCH_BLOCK]
