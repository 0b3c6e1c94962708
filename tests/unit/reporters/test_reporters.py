import asyncio
import json
from io import StringIO

import pytest
from rich.console import Console

from codegateway.engine.analyzer import Analyzer
from codegateway.models.pattern import PATTERN_METADATA, PatternType
from codegateway.reporters import ConsoleReporter, JsonReporter, SarifReporter, load_patterns
from codegateway.reporters.sarif import build_sarif

SOURCE = """\
const data = load();
try {
  run();
} catch (e) {}
let t = 42;
"""


@pytest.fixture
def results():
    analyzer = Analyzer()
    return asyncio.run(analyzer.analyze_files([("src/app.js", SOURCE)]))


def test_json_report_round_trips(results, tmp_path):
    output = tmp_path / "report.json"
    JsonReporter(str(output)).report(results)

    loaded = load_patterns(output.read_text())
    assert loaded == results[0].patterns


def test_json_report_to_stdout(results, capsys):
    JsonReporter().report(results)

    data = json.loads(capsys.readouterr().out)
    assert [item["type"] for item in data] == [p.type.value for p in results[0].patterns]


def test_sarif_levels_and_rules(results):
    sarif = build_sarif(results)
    run = sarif["runs"][0]

    assert sarif["version"] == "2.1.0"
    assert len(run["tool"]["driver"]["rules"]) == len(PATTERN_METADATA)

    by_rule = {r["ruleId"]: r for r in run["results"]}
    assert by_rule[PatternType.EMPTY_CATCH_BLOCK.value]["level"] == "error"
    assert by_rule[PatternType.GENERIC_VARIABLE_NAME.value]["level"] == "warning"
    assert by_rule[PatternType.MAGIC_NUMBER.value]["level"] == "note"

    region = by_rule[PatternType.EMPTY_CATCH_BLOCK.value]["locations"][0]["physicalLocation"]["region"]
    assert region["startLine"] == 4


def test_sarif_properties_keep_the_record(results, tmp_path):
    output = tmp_path / "report.sarif"
    SarifReporter(str(output)).report(results)

    sarif = json.loads(output.read_text())
    first = sarif["runs"][0]["results"][0]["properties"]
    assert first["id"] == results[0].patterns[0].id
    assert first["confidence"] == results[0].patterns[0].confidence


def test_console_report_groups_by_file(results, capsys):
    console = Console(file=StringIO(), width=120)
    ConsoleReporter(console=console).report(results)

    out = capsys.readouterr().out
    assert "src/app.js" in out
    assert "[CRITICAL] Line 4: Empty catch block silently swallows errors" in out

    assert f"Summary: {len(results[0].patterns)} pattern(s) found" in out
    table = console.file.getvalue()
    assert "CRITICAL" in table
