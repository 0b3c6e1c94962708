from __future__ import annotations
import re
from typing import FrozenSet, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, PrivateAttr

from codegateway.config.defaults import (
    DEFAULT_COORDINATE_VARIABLE_NAMES,
    DEFAULT_GENERIC_ERROR_MESSAGES,
    DEFAULT_GENERIC_VARIABLE_NAMES,
    DEFAULT_LOOP_VARIABLE_NAMES,
    DEFAULT_SECRET_PATTERNS,
)
from codegateway.config.engine import ResolvedConfig
from codegateway.utils.logging import get_logger

logger = get_logger(__name__)


class DetectorSettings(BaseModel):
    """
    Read-only vocabulary shared by every detector during one analysis call.

    The user extensions are merged with the built-in lists once, at
    construction; detectors only read the merged views.
    """
    model_config = ConfigDict(frozen=True)

    generic_variable_names: Tuple[str, ...] = ()
    loop_variable_names: Tuple[str, ...] = ()
    coordinate_variable_names: Tuple[str, ...] = ()
    generic_error_messages: Tuple[str, ...] = ()
    secret_patterns: Tuple[str, ...] = ()

    _generic_names: FrozenSet[str] = PrivateAttr(default=frozenset())
    _loop_names: FrozenSet[str] = PrivateAttr(default=frozenset())
    _coordinate_names: FrozenSet[str] = PrivateAttr(default=frozenset())
    _error_messages: Tuple[str, ...] = PrivateAttr(default=())
    _secret_regexes: Tuple[Pattern, ...] = PrivateAttr(default=())

    def model_post_init(self, __context) -> None:
        self._generic_names = frozenset(
            name.lower() for name in DEFAULT_GENERIC_VARIABLE_NAMES + self.generic_variable_names
        )
        self._loop_names = frozenset(DEFAULT_LOOP_VARIABLE_NAMES + self.loop_variable_names)
        self._coordinate_names = frozenset(
            DEFAULT_COORDINATE_VARIABLE_NAMES + self.coordinate_variable_names
        )
        messages = []
        for message in DEFAULT_GENERIC_ERROR_MESSAGES + self.generic_error_messages:
            lowered = message.lower()
            if lowered not in messages:
                messages.append(lowered)
        self._error_messages = tuple(messages)
        self._secret_regexes = DEFAULT_SECRET_PATTERNS + _compile_secret_patterns(self.secret_patterns)

    @classmethod
    def from_config(cls, config: ResolvedConfig) -> "DetectorSettings":
        return cls(
            generic_variable_names=tuple(config.generic_variable_names),
            loop_variable_names=tuple(config.loop_variable_names),
            coordinate_variable_names=tuple(config.coordinate_variable_names),
            generic_error_messages=tuple(config.generic_error_messages),
            secret_patterns=tuple(config.secret_patterns),
        )

    @property
    def generic_names(self) -> FrozenSet[str]:
        """Lower-cased generic names, built-in plus configured."""
        return self._generic_names

    @property
    def loop_names(self) -> FrozenSet[str]:
        return self._loop_names

    @property
    def coordinate_names(self) -> FrozenSet[str]:
        return self._coordinate_names

    @property
    def error_messages(self) -> Tuple[str, ...]:
        return self._error_messages

    @property
    def secret_regexes(self) -> Tuple[Pattern, ...]:
        return self._secret_regexes


def _compile_secret_patterns(patterns: Tuple[str, ...]) -> Tuple[Pattern, ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            logger.warning("invalid_secret_pattern", pattern=pattern, error=str(e))
    return tuple(compiled)
