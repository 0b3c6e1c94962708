import pytest
from pydantic import ValidationError

from codegateway.models.pattern import (
    ALL_PATTERN_TYPES,
    PATTERN_METADATA,
    PatternLocation,
    PatternRecord,
    PatternType,
    Severity,
    compare_severity,
    meets_severity_threshold,
)


def make_record(**overrides):
    fields = dict(
        id="naming-src/a.js-1-deadbeef",
        type=PatternType.GENERIC_VARIABLE_NAME,
        severity=Severity.WARNING,
        location=PatternLocation(file="src/a.js", start_line=1, end_line=1),
        description="Variable \"data\" is a generic name",
        explanation="Consider renaming.",
        code_snippet="data = foo()",
        detector_id="naming",
    )
    fields.update(overrides)
    return PatternRecord(**fields)


def test_every_pattern_type_has_metadata():
    assert len(ALL_PATTERN_TYPES) == 23
    assert set(PATTERN_METADATA) == set(PatternType)


def test_severity_ordering_helpers():
    assert compare_severity(Severity.CRITICAL, Severity.INFO) < 0
    assert compare_severity(Severity.INFO, Severity.WARNING) > 0
    assert compare_severity(Severity.WARNING, Severity.WARNING) == 0
    assert meets_severity_threshold(Severity.CRITICAL, Severity.WARNING)
    assert not meets_severity_threshold(Severity.INFO, Severity.WARNING)
    assert meets_severity_threshold("warning", "warning")


def test_record_defaults_and_accessors():
    record = make_record()

    assert record.confidence == 0.8
    assert record.auto_fix_available is False
    assert record.file == "src/a.js"
    assert record.start_line == 1


@pytest.mark.parametrize("confidence", [-0.1, 1.5])
def test_confidence_must_be_a_probability(confidence):
    with pytest.raises(ValidationError):
        make_record(confidence=confidence)


def test_lines_are_one_based():
    with pytest.raises(ValidationError):
        PatternLocation(file="src/a.js", start_line=0, end_line=1)


def test_json_round_trip_is_lossless():
    record = make_record(suggestion="Rename it", confidence=0.85)

    assert PatternRecord.model_validate_json(record.model_dump_json()) == record
