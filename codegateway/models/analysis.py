from __future__ import annotations
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from codegateway.models.pattern import PatternRecord, PatternType, Severity


class AnalysisResult(BaseModel):
    file: str
    language: Optional[str] = None
    patterns: List[PatternRecord] = Field(default_factory=list)
    analyzed_at: datetime = Field(default_factory=datetime.now)
    duration_ms: float = 0.0


def _empty_severity_counts() -> Dict[Severity, int]:
    return {severity: 0 for severity in Severity}


class AnalysisSummary(BaseModel):
    total_files: int = 0
    total_patterns: int = 0
    by_severity: Dict[Severity, int] = Field(default_factory=_empty_severity_counts)
    by_type: Dict[PatternType, int] = Field(default_factory=dict)
    total_duration_ms: float = 0.0

    @classmethod
    def from_results(cls, results: Iterable[AnalysisResult]) -> "AnalysisSummary":
        results = list(results)
        summary = cls(total_files=len(results))
        for result in results:
            summary.total_duration_ms += result.duration_ms
            for pattern in result.patterns:
                summary.total_patterns += 1
                summary.by_severity[pattern.severity] += 1
                summary.by_type[pattern.type] = summary.by_type.get(pattern.type, 0) + 1
        return summary
