from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from codegateway.cli.main import main
from codegateway.models.pattern import PatternType
from codegateway.reporters import load_patterns

EMPTY_CATCH = "try {\n  run();\n} catch (e) {}\n"


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    with patch("pathlib.Path.home", return_value=home):
        yield project


def test_analyze_single_file(workdir):
    (workdir / "app.js").write_text(EMPTY_CATCH)

    result = CliRunner().invoke(main, ['analyze', 'app.js'])

    assert result.exit_code == 0
    assert "Empty catch block silently swallows errors" in result.output
    assert "pattern(s) found" in result.output


def test_fail_on_threshold(workdir):
    (workdir / "app.js").write_text(EMPTY_CATCH)

    result = CliRunner().invoke(main, ['analyze', 'app.js', '--fail-on', 'critical'])

    assert result.exit_code == 1


def test_fail_on_not_met(workdir):
    (workdir / "app.js").write_text("const total = compute();\n")

    result = CliRunner().invoke(main, ['analyze', 'app.js', '--fail-on', 'warning'])

    assert result.exit_code == 0


def test_json_output_skips_excluded_directories(workdir):
    (workdir / "src").mkdir()
    (workdir / "src" / "app.ts").write_text(EMPTY_CATCH)
    vendored = workdir / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "index.js").write_text(EMPTY_CATCH)

    result = CliRunner().invoke(main, ['analyze', '.', '--format', 'json', '--output', 'report.json'])

    assert result.exit_code == 0
    patterns = load_patterns((workdir / "report.json").read_text())
    assert {p.file for p in patterns} == {"src/app.ts"}
    assert PatternType.EMPTY_CATCH_BLOCK in {p.type for p in patterns}


def test_severity_option_filters(workdir):
    (workdir / "app.js").write_text(EMPTY_CATCH + "let t = 42;\n")

    result = CliRunner().invoke(main, ['analyze', 'app.js', '-s', 'critical', '-f', 'json', '-o', 'out.json'])

    assert result.exit_code == 0
    patterns = load_patterns((workdir / "out.json").read_text())
    assert [p.type for p in patterns] == [PatternType.EMPTY_CATCH_BLOCK]


def test_project_config_is_applied(workdir):
    (workdir / "codegateway.yaml").write_text("min_severity: critical\n")
    (workdir / "app.js").write_text("const data = load();\n")

    result = CliRunner().invoke(main, ['analyze', 'app.js', '-f', 'json', '-o', 'out.json'])

    assert result.exit_code == 0
    assert load_patterns((workdir / "out.json").read_text()) == []


def test_invalid_config_reports_error(workdir):
    (workdir / "codegateway.yaml").write_text("min_severity: fatal\n")
    (workdir / "app.js").write_text(EMPTY_CATCH)

    result = CliRunner().invoke(main, ['analyze', 'app.js'])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_no_files_found(workdir):
    (workdir / "notes.md").write_text("# notes")

    result = CliRunner().invoke(main, ['analyze', '.'])

    assert result.exit_code == 0
    assert "No files found to analyze" in result.output


def test_analyze_invalid_path(workdir):
    result = CliRunner().invoke(main, ['analyze', 'nonexistent/path'])

    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_init_writes_config_once(workdir):
    runner = CliRunner()

    first = runner.invoke(main, ['init'])
    assert first.exit_code == 0
    assert (workdir / "codegateway.yaml").is_file()

    second = runner.invoke(main, ['init'])
    assert second.exit_code == 1
    assert "already exists" in second.output

    forced = runner.invoke(main, ['init', '--force'])
    assert forced.exit_code == 0
