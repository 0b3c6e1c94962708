import re

from codegateway.models.pattern import ALL_PATTERN_TYPES, Severity

# Built-in vocabularies. User configuration extends these, never replaces them.

DEFAULT_GENERIC_VARIABLE_NAMES = (
    "data", "result", "results", "response", "res", "resp",
    "value", "val", "item", "items", "element", "elem",
    "temp", "tmp", "foo", "bar", "baz", "obj", "object",
    "thing", "stuff", "arr", "array", "list", "str", "string",
    "num", "number", "ret", "return", "output", "out",
)

DEFAULT_LOOP_VARIABLE_NAMES = ("i", "j", "k", "n", "m")

DEFAULT_COORDINATE_VARIABLE_NAMES = ("x", "y", "z", "w")

DEFAULT_GENERIC_ERROR_MESSAGES = (
    "an error occurred",
    "something went wrong",
    "error",
    "failed",
    "oops",
    "unknown error",
    "internal error",
    "unexpected error",
)

DEFAULT_SECRET_PATTERNS = (
    re.compile(r"""(?:api[_-]?key|apikey)\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"""(?:secret|password|passwd|pwd)\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"""(?:token|auth)\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"""(?:private[_-]?key)\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"Bearer\s+[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+"),
    re.compile(r"-----BEGIN\s+(?:RSA\s+)?PRIVATE\s+KEY-----"),
)

DEFAULT_EXCLUDE = [
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/.git/**",
    "**/*.min.js",
    "**/*.bundle.js",
]

CONFIG_FILE_NAMES = (
    "codegateway.yaml",
    ".codegateway.yaml",
    "codegateway.config.json",
    ".codegaterc.json",
    ".codegaterc",
)

DEFAULT_CONFIG = {
    "enabled_patterns": [p.value for p in ALL_PATTERN_TYPES],
    "min_severity": Severity.INFO.value,
    "severity_overrides": {},
    "exclude": list(DEFAULT_EXCLUDE),
    "generic_variable_names": [],
    "loop_variable_names": [],
    "coordinate_variable_names": [],
    "generic_error_messages": [],
    "secret_patterns": [],
    "block_on_critical": True,
    "block_on_warning": False,
    "show_checkpoint": True,
    "show_inline_hints": True,
    "debounce_ms": 500,
    "analyze_on_open": True,
    "analyze_on_save": True,
}
