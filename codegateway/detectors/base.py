from __future__ import annotations
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from codegateway.analyzers.workspace import SourceWorkspace
from codegateway.config.detectors import DetectorSettings
from codegateway.models.pattern import PatternLocation, PatternRecord, PatternType, Severity

JS_LANGUAGES = ["typescript", "javascript"]


class BaseDetector(ABC):
    """
    Abstract base class for a pattern detector.

    Detectors are stateless between calls. The workspace they own only holds
    transient per-file entries for the duration of one `analyze` call, so a
    single instance can serve many files concurrently.
    """
    id: str
    patterns: List[PatternType]
    languages: List[str] = JS_LANGUAGES

    def __init__(self):
        self.workspace = SourceWorkspace()

    @abstractmethod
    def analyze(self, source: str, path: str, settings: Optional[DetectorSettings] = None) -> List[PatternRecord]:
        """
        Analyzes one file and returns the patterns found in it.

        Args:
            source: The source text.
            path: The file path, used for grammar selection and reporting.
            settings: Merged detector vocabulary; built-in defaults when None.

        Returns:
            A list of pattern records, or an empty list.
        """
        raise NotImplementedError

    def create_pattern(
        self,
        type: PatternType,
        file: str,
        start_line: int,
        end_line: int,
        description: str,
        explanation: str,
        code_snippet: str,
        severity: Severity = Severity.WARNING,
        start_column: Optional[int] = None,
        end_column: Optional[int] = None,
        suggestion: Optional[str] = None,
        confidence: float = 0.8,
        auto_fix_available: bool = False,
    ) -> PatternRecord:
        return PatternRecord(
            id=f"{self.id}-{file}-{start_line}-{uuid.uuid4().hex[:8]}",
            type=type,
            severity=severity,
            location=PatternLocation(
                file=file,
                start_line=start_line,
                end_line=end_line,
                start_column=start_column,
                end_column=end_column,
            ),
            description=description,
            explanation=explanation,
            code_snippet=code_snippet,
            suggestion=suggestion,
            confidence=confidence,
            auto_fix_available=auto_fix_available,
            detector_id=self.id,
        )
