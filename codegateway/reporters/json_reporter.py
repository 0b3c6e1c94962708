from typing import List, Optional

import click
from pydantic import TypeAdapter

from codegateway.models.analysis import AnalysisResult
from codegateway.models.pattern import PatternRecord

from .base import BaseReporter

_PATTERN_LIST = TypeAdapter(List[PatternRecord])


def dump_patterns(patterns: List[PatternRecord]) -> str:
    return _PATTERN_LIST.dump_json(patterns, indent=2).decode("utf-8")


def load_patterns(data: str) -> List[PatternRecord]:
    """Reads back a report written by JsonReporter."""
    return _PATTERN_LIST.validate_json(data)


class JsonReporter(BaseReporter):
    """Writes every pattern record as a JSON array, to a file or stdout."""

    def __init__(self, output_path: Optional[str] = None):
        self.output_path = output_path

    def report(self, results: List[AnalysisResult]) -> None:
        patterns = [pattern for result in results for pattern in result.patterns]
        content = dump_patterns(patterns)
        if self.output_path:
            with open(self.output_path, "w", encoding="utf-8") as f:
                f.write(content)
            click.echo(f"JSON report saved to {self.output_path}", err=True)
        else:
            click.echo(content)
