from typing import Dict, List, Optional

import click
from rich.console import Console

from codegateway.cli.formatter import colorize_severity, format_table
from codegateway.models.analysis import AnalysisResult, AnalysisSummary
from codegateway.models.pattern import PatternRecord, Severity

from .base import BaseReporter

SUMMARY_WIDTH = 50


def group_by_file(patterns: List[PatternRecord]) -> Dict[str, List[PatternRecord]]:
    by_file: Dict[str, List[PatternRecord]] = {}
    for pattern in patterns:
        by_file.setdefault(pattern.file, []).append(pattern)
    return by_file


class ConsoleReporter(BaseReporter):
    """Human-readable findings grouped by file, followed by a severity table."""

    def __init__(self, summary: Optional[AnalysisSummary] = None, console: Optional[Console] = None):
        self.summary = summary
        self.console = console or Console()

    def report(self, results: List[AnalysisResult]) -> None:
        patterns = [pattern for result in results for pattern in result.patterns]

        for file, file_patterns in group_by_file(patterns).items():
            click.echo(f"\n{file}")
            click.echo("=" * len(file))
            for pattern in file_patterns:
                click.echo(f"  [{pattern.severity.value.upper()}] Line {pattern.start_line}: {pattern.description}")
                click.echo(f"     {pattern.explanation}")
                if pattern.suggestion:
                    click.echo(f"     -> {pattern.suggestion}")

        summary = self.summary or AnalysisSummary.from_results(results)
        click.echo(f"\n{'=' * SUMMARY_WIDTH}")
        click.echo(f"Summary: {summary.total_patterns} pattern(s) found")
        rows = [
            (colorize_severity(severity), summary.by_severity.get(severity, 0))
            for severity in (Severity.CRITICAL, Severity.WARNING, Severity.INFO)
        ]
        self.console.print(format_table(rows, ["Severity", "Count"]))

