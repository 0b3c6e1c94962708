from __future__ import annotations
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codegateway.config.defaults import DEFAULT_EXCLUDE
from codegateway.models.pattern import ALL_PATTERN_TYPES, PatternType, Severity


class ResolvedConfig(BaseModel):
    """
    Fully merged configuration handed to the analyzer.

    Keys may be given in snake_case or in the camelCase form used by the
    JSON config files (``enabledPatterns``, ``severityOverrides``...).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    enabled_patterns: List[PatternType] = Field(default_factory=lambda: list(ALL_PATTERN_TYPES))
    min_severity: Severity = Severity.INFO
    severity_overrides: Dict[PatternType, Severity] = Field(default_factory=dict)
    exclude: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE))

    # Detector vocabulary extensions, layered on top of the built-ins.
    generic_variable_names: List[str] = Field(default_factory=list)
    loop_variable_names: List[str] = Field(default_factory=list)
    coordinate_variable_names: List[str] = Field(default_factory=list)
    generic_error_messages: List[str] = Field(default_factory=list)
    secret_patterns: List[str] = Field(default_factory=list)

    # Git and editor knobs; the engine carries them but does not act on them.
    block_on_critical: bool = True
    block_on_warning: bool = False
    show_checkpoint: bool = True
    show_inline_hints: bool = True
    debounce_ms: int = 500
    analyze_on_open: bool = True
    analyze_on_save: bool = True

    @classmethod
    def default(cls) -> "ResolvedConfig":
        return cls()

    @classmethod
    def normalize_keys(cls, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Maps camelCase keys onto field names so merges override the right entry."""
        aliases = {field.alias: name for name, field in cls.model_fields.items() if field.alias}
        return {aliases.get(key, key): value for key, value in raw.items()}
