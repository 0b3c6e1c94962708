from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
}


def compare_severity(a: Severity, b: Severity) -> int:
    """Sort key helper: negative when `a` should come first (more severe)."""
    return Severity(b).rank - Severity(a).rank


def meets_severity_threshold(severity: Severity, min_severity: Severity) -> bool:
    return Severity(severity).rank >= Severity(min_severity).rank


class PatternType(str, Enum):
    # Naming
    GENERIC_VARIABLE_NAME = "generic_variable_name"
    INCONSISTENT_NAMING = "inconsistent_naming"
    # Error handling
    EMPTY_CATCH_BLOCK = "empty_catch_block"
    SWALLOWED_ERROR = "swallowed_error"
    MISSING_ERROR_BOUNDARY = "missing_error_boundary"
    GENERIC_ERROR_MESSAGE = "generic_error_message"
    TRY_WITHOUT_CATCH = "try_without_catch"
    # Security
    HARDCODED_SECRET = "hardcoded_secret"
    SQL_CONCATENATION = "sql_concatenation"
    UNSAFE_EVAL = "unsafe_eval"
    INSECURE_RANDOM = "insecure_random"
    MISSING_INPUT_VALIDATION = "missing_input_validation"
    # Code quality
    COPY_PASTE_PATTERN = "copy_paste_pattern"
    MAGIC_NUMBER = "magic_number"
    TODO_WITHOUT_CONTEXT = "todo_without_context"
    COMMENTED_OUT_CODE = "commented_out_code"
    OVERLY_COMPLEX_FUNCTION = "overly_complex_function"
    # AI-specific
    PLACEHOLDER_IMPLEMENTATION = "placeholder_implementation"
    INCOMPLETE_EDGE_CASE = "incomplete_edge_case"
    MOCK_DATA_IN_PRODUCTION = "mock_data_in_production"
    FRAMEWORK_VERSION_MISMATCH = "framework_version_mismatch"
    UNNECESSARY_ABSTRACTION = "unnecessary_abstraction"
    CONTEXT_MISMATCH = "context_mismatch"


class PatternMetadata(BaseModel):
    description: str
    default_severity: Severity


PATTERN_METADATA: Dict[PatternType, PatternMetadata] = {
    PatternType.GENERIC_VARIABLE_NAME: PatternMetadata(
        description="Variable has a generic, non-descriptive name", default_severity=Severity.WARNING),
    PatternType.INCONSISTENT_NAMING: PatternMetadata(
        description="Naming convention inconsistent within scope", default_severity=Severity.INFO),
    PatternType.EMPTY_CATCH_BLOCK: PatternMetadata(
        description="Catch block is empty or only has comments", default_severity=Severity.CRITICAL),
    PatternType.SWALLOWED_ERROR: PatternMetadata(
        description="Error is caught but not logged or rethrown", default_severity=Severity.WARNING),
    PatternType.MISSING_ERROR_BOUNDARY: PatternMetadata(
        description="Async code without try-catch or .catch()", default_severity=Severity.WARNING),
    PatternType.GENERIC_ERROR_MESSAGE: PatternMetadata(
        description="Error message provides no debugging context", default_severity=Severity.INFO),
    PatternType.TRY_WITHOUT_CATCH: PatternMetadata(
        description="try...finally without catch clause", default_severity=Severity.INFO),
    PatternType.HARDCODED_SECRET: PatternMetadata(
        description="Potential secret/API key hardcoded in source", default_severity=Severity.CRITICAL),
    PatternType.SQL_CONCATENATION: PatternMetadata(
        description="SQL query built with string concatenation", default_severity=Severity.CRITICAL),
    PatternType.UNSAFE_EVAL: PatternMetadata(
        description="Use of eval() or equivalent", default_severity=Severity.CRITICAL),
    PatternType.INSECURE_RANDOM: PatternMetadata(
        description="Math.random() used for security purposes", default_severity=Severity.WARNING),
    PatternType.MISSING_INPUT_VALIDATION: PatternMetadata(
        description="User input used without validation", default_severity=Severity.WARNING),
    PatternType.COPY_PASTE_PATTERN: PatternMetadata(
        description="Duplicated code blocks detected", default_severity=Severity.WARNING),
    PatternType.MAGIC_NUMBER: PatternMetadata(
        description="Numeric literal without explanation", default_severity=Severity.INFO),
    PatternType.TODO_WITHOUT_CONTEXT: PatternMetadata(
        description="TODO/FIXME comment lacks detail", default_severity=Severity.INFO),
    PatternType.COMMENTED_OUT_CODE: PatternMetadata(
        description="Large block of commented-out code", default_severity=Severity.INFO),
    PatternType.OVERLY_COMPLEX_FUNCTION: PatternMetadata(
        description="Function has high cyclomatic complexity", default_severity=Severity.WARNING),
    PatternType.PLACEHOLDER_IMPLEMENTATION: PatternMetadata(
        description="Function body is TODO/pass/NotImplemented", default_severity=Severity.CRITICAL),
    PatternType.INCOMPLETE_EDGE_CASE: PatternMetadata(
        description="Missing null check or boundary condition", default_severity=Severity.WARNING),
    PatternType.MOCK_DATA_IN_PRODUCTION: PatternMetadata(
        description="Hardcoded test/mock data in production code", default_severity=Severity.CRITICAL),
    PatternType.FRAMEWORK_VERSION_MISMATCH: PatternMetadata(
        description="Using deprecated API or old syntax", default_severity=Severity.WARNING),
    PatternType.UNNECESSARY_ABSTRACTION: PatternMetadata(
        description="Over-engineered solution for simple problem", default_severity=Severity.INFO),
    PatternType.CONTEXT_MISMATCH: PatternMetadata(
        description="Code style inconsistent with project", default_severity=Severity.WARNING),
}

ALL_PATTERN_TYPES: List[PatternType] = list(PATTERN_METADATA.keys())


class PatternLocation(BaseModel):
    file: str
    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)
    start_column: Optional[int] = None
    end_column: Optional[int] = None


class PatternRecord(BaseModel):
    """A single finding reported by a detector."""
    id: str
    type: PatternType
    severity: Severity
    location: PatternLocation
    description: str
    explanation: str
    code_snippet: str
    suggestion: Optional[str] = None
    confidence: float = Field(0.8, ge=0.0, le=1.0)
    auto_fix_available: bool = False
    detector_id: str
    detected_at: datetime = Field(default_factory=datetime.now)

    @property
    def file(self) -> str:
        return self.location.file

    @property
    def start_line(self) -> int:
        return self.location.start_line
