import json
from typing import Any, Dict, List, Optional

import click

from codegateway import __version__
from codegateway.models.analysis import AnalysisResult
from codegateway.models.pattern import PATTERN_METADATA, PatternRecord, Severity

from .base import BaseReporter

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"

SARIF_LEVELS = {
    Severity.CRITICAL: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}


def build_sarif(results: List[AnalysisResult]) -> Dict[str, Any]:
    rules = [
        {
            "id": pattern_type.value,
            "name": pattern_type.value,
            "shortDescription": {"text": metadata.description},
            "defaultConfiguration": {"level": SARIF_LEVELS[metadata.default_severity]},
        }
        for pattern_type, metadata in PATTERN_METADATA.items()
    ]
    rule_index = {rule["id"]: index for index, rule in enumerate(rules)}

    sarif_results = [
        _sarif_result(pattern, rule_index)
        for result in results
        for pattern in result.patterns
    ]

    return {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "codegateway",
                        "version": __version__,
                        "rules": rules,
                    }
                },
                "results": sarif_results,
            }
        ],
    }


def _sarif_result(pattern: PatternRecord, rule_index: Dict[str, int]) -> Dict[str, Any]:
    location = pattern.location
    region: Dict[str, Any] = {
        "startLine": location.start_line,
        "endLine": location.end_line,
        "snippet": {"text": pattern.code_snippet},
    }
    if location.start_column is not None:
        region["startColumn"] = location.start_column
    if location.end_column is not None:
        region["endColumn"] = location.end_column

    return {
        "ruleId": pattern.type.value,
        "ruleIndex": rule_index[pattern.type.value],
        "level": SARIF_LEVELS[pattern.severity],
        "message": {"text": pattern.description},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": location.file.replace("\\", "/")},
                    "region": region,
                }
            }
        ],
        # Keep the full record so nothing is lost in translation.
        "properties": pattern.model_dump(mode="json"),
    }


class SarifReporter(BaseReporter):
    """Writes a SARIF 2.1.0 log for code scanning integrations."""

    def __init__(self, output_path: Optional[str] = None):
        self.output_path = output_path

    def report(self, results: List[AnalysisResult]) -> None:
        content = json.dumps(build_sarif(results), indent=2)
        if self.output_path:
            with open(self.output_path, "w", encoding="utf-8") as f:
                f.write(content)
            click.echo(f"SARIF report saved to {self.output_path}", err=True)
        else:
            click.echo(content)
