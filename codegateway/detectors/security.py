from __future__ import annotations
import re
from typing import List, Optional, Sequence

from tree_sitter import Node

from codegateway.analyzers import nodes
from codegateway.analyzers.workspace import ParsedSource
from codegateway.config.detectors import DetectorSettings
from codegateway.detectors.base import BaseDetector
from codegateway.models.pattern import PatternRecord, PatternType, Severity

MASK = "***MASKED***"

# Files that routinely carry fixture credentials; secret scanning skips them.
SECRET_SCAN_SKIP_PATTERNS = [
    re.compile(r"\.test\.[tj]sx?$"),
    re.compile(r"\.spec\.[tj]sx?$"),
    re.compile(r"__tests__"),
    re.compile(r"\.config\.[tj]s$"),
    re.compile(r"\.example\."),
    re.compile(r"\.sample\."),
]

ENV_REFERENCE = re.compile(r"process\.env\.|import\.meta\.env\.|\$\{.*env.*\}", re.IGNORECASE)
QUOTED_VALUE = re.compile(r"""['"]([^'"]+)['"]""")
JWT_TOKEN = re.compile(r"^eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$")
AWS_ACCESS_KEY = re.compile(r"^AKIA[0-9A-Z]{16}$")
SQL_KEYWORDS = re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE|FROM|WHERE|JOIN|AND|OR)\b", re.IGNORECASE)
SECURITY_KEYWORDS = re.compile(
    r"\b(token|secret|key|password|auth|session|csrf|nonce|salt|hash|id|uuid)\b", re.IGNORECASE
)

TIMER_FUNCTIONS = {"setTimeout", "setInterval"}


def should_skip_secret_scan(file_path: str) -> bool:
    normalized = file_path.replace("\\", "/")
    return any(p.search(normalized) for p in SECRET_SCAN_SKIP_PATTERNS)


def mask_secret(line: str, match_text: str) -> str:
    """Replaces the secret inside `line` with its first 4 characters and a mask marker."""
    quoted = QUOTED_VALUE.search(match_text)
    if quoted:
        value = quoted.group(1)
    elif "PRIVATE KEY" in match_text:
        return line
    else:
        value = match_text
    masked = value[:4] + MASK if len(value) > 4 else MASK
    return line.replace(value, masked, 1)


def mask_line(line: str, regexes: Sequence[re.Pattern]) -> str:
    """Masks every secret any of `regexes` finds on `line`, not only the reported one."""
    masked = line
    for regex in regexes:
        for match in regex.finditer(line):
            masked = mask_secret(masked, match.group(0))
    return masked


class SecurityDetector(BaseDetector):
    """Flags hardcoded credentials, injectable SQL and dynamic code execution."""
    id = "security"
    patterns = [
        PatternType.HARDCODED_SECRET,
        PatternType.SQL_CONCATENATION,
        PatternType.UNSAFE_EVAL,
        PatternType.INSECURE_RANDOM,
    ]

    def analyze(self, source: str, path: str, settings: Optional[DetectorSettings] = None) -> List[PatternRecord]:
        settings = settings or DetectorSettings()
        patterns: List[PatternRecord] = []

        with self.workspace.open(source, path) as src:
            if not should_skip_secret_scan(path):
                patterns.extend(self._detect_hardcoded_secrets(src, settings))
            patterns.extend(self._detect_sql_concatenation(src))
            patterns.extend(self._detect_unsafe_eval(src))
            patterns.extend(self._detect_insecure_random(src))

        return patterns

    def _detect_hardcoded_secrets(self, src: ParsedSource, settings: DetectorSettings) -> List[PatternRecord]:
        patterns = []

        for index, line in enumerate(src.lines):
            for regex in settings.secret_regexes:
                match = regex.search(line)
                if not match:
                    continue
                if ENV_REFERENCE.search(line):
                    continue

                patterns.append(self.create_pattern(
                    PatternType.HARDCODED_SECRET,
                    src.path,
                    index + 1,
                    index + 1,
                    "Potential hardcoded secret detected",
                    "Hardcoded secrets will be exposed in version control history. "
                    "Use environment variables or a secrets manager instead.",
                    mask_line(line, settings.secret_regexes),
                    severity=Severity.CRITICAL,
                    start_column=match.start() + 1,
                    end_column=match.end() + 1,
                    suggestion="Move this secret to an environment variable or secrets manager (e.g., process.env.API_KEY)",
                    confidence=0.9,
                ))
                break  # One report per line

        for literal in src.nodes_of_type("string"):
            text = nodes.string_value(src, literal)

            if JWT_TOKEN.match(text):
                patterns.append(self.create_pattern(
                    PatternType.HARDCODED_SECRET,
                    src.path,
                    nodes.start_line(literal),
                    nodes.end_line(literal),
                    "Hardcoded JWT token detected",
                    "JWT tokens should not be hardcoded. They will be exposed in version control.",
                    f'"{text[:20]}...[MASKED]"',
                    severity=Severity.CRITICAL,
                    suggestion="Store tokens securely and retrieve them at runtime",
                    confidence=0.95,
                ))

            if AWS_ACCESS_KEY.match(text):
                patterns.append(self.create_pattern(
                    PatternType.HARDCODED_SECRET,
                    src.path,
                    nodes.start_line(literal),
                    nodes.end_line(literal),
                    "Hardcoded AWS access key detected",
                    "AWS credentials should never be in source code.",
                    f'"{text[:8]}...[MASKED]"',
                    severity=Severity.CRITICAL,
                    suggestion="Use AWS SDK credential providers or environment variables",
                    confidence=0.98,
                ))

        return patterns

    def _detect_sql_concatenation(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []

        for template in src.nodes_of_type("template_string"):
            text = src.text(template)
            has_interpolation = any(child.type == "template_substitution" for child in template.named_children)
            if not has_interpolation or not SQL_KEYWORDS.search(text):
                continue
            patterns.append(self.create_pattern(
                PatternType.SQL_CONCATENATION,
                src.path,
                nodes.start_line(template),
                nodes.end_line(template),
                "SQL query with string interpolation - potential SQL injection",
                "Building SQL queries with string interpolation can lead to SQL injection vulnerabilities. "
                "Use parameterized queries instead.",
                nodes.truncate_code(text, 150),
                severity=Severity.CRITICAL,
                suggestion="Use parameterized queries or an ORM with proper escaping",
                confidence=0.85,
            ))

        for expr in src.nodes_of_type("binary_expression"):
            if not self._is_concatenation(expr):
                continue
            # Report a chain `a + b + c` once, at its outermost node.
            if expr.parent is not None and self._is_concatenation(expr.parent):
                continue

            text = src.text(expr)
            if not SQL_KEYWORDS.search(text):
                continue
            if not src.descendants(expr, ("identifier", "member_expression")):
                continue

            patterns.append(self.create_pattern(
                PatternType.SQL_CONCATENATION,
                src.path,
                nodes.start_line(expr),
                nodes.end_line(expr),
                "SQL query built with string concatenation - potential SQL injection",
                "Building SQL queries with string concatenation can lead to SQL injection vulnerabilities.",
                nodes.truncate_code(text, 150),
                severity=Severity.CRITICAL,
                suggestion="Use parameterized queries or an ORM",
                confidence=0.8,
            ))

        return patterns

    def _detect_unsafe_eval(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []

        for call in src.nodes_of_type("call_expression", "new_expression"):
            func_name = nodes.callee_text(src, call)

            if call.type == "new_expression":
                if func_name == "Function":
                    patterns.append(self._function_constructor_pattern(src, call, "Use of new Function() is similar to eval()"))
                continue

            if func_name == "eval":
                patterns.append(self.create_pattern(
                    PatternType.UNSAFE_EVAL,
                    src.path,
                    nodes.start_line(call),
                    nodes.end_line(call),
                    "Use of eval() is a security risk",
                    "eval() can execute arbitrary code and is a common source of security vulnerabilities. "
                    "It also prevents JavaScript engine optimizations.",
                    src.text(call),
                    severity=Severity.CRITICAL,
                    suggestion="Use JSON.parse() for JSON data, or restructure code to avoid dynamic evaluation",
                    confidence=0.95,
                ))
            elif func_name == "Function":
                patterns.append(self._function_constructor_pattern(src, call, "Use of Function constructor is similar to eval()"))
            elif func_name in TIMER_FUNCTIONS:
                args = nodes.call_arguments(call)
                if args and args[0].type == "string":
                    patterns.append(self.create_pattern(
                        PatternType.UNSAFE_EVAL,
                        src.path,
                        nodes.start_line(call),
                        nodes.end_line(call),
                        f"{func_name} with string argument is similar to eval()",
                        "Passing a string to setTimeout/setInterval causes it to be evaluated, which is a security risk.",
                        src.text(call),
                        severity=Severity.WARNING,
                        suggestion="Pass a function reference instead of a string",
                        confidence=0.9,
                    ))

        return patterns

    def _function_constructor_pattern(self, src: ParsedSource, call: Node, description: str) -> PatternRecord:
        return self.create_pattern(
            PatternType.UNSAFE_EVAL,
            src.path,
            nodes.start_line(call),
            nodes.end_line(call),
            description,
            "The Function constructor creates a function from a string, which has similar security risks to eval().",
            src.text(call),
            severity=Severity.CRITICAL,
            suggestion="Use regular function declarations or arrow functions",
            confidence=0.9,
        )

    def _detect_insecure_random(self, src: ParsedSource) -> List[PatternRecord]:
        patterns = []

        for call in src.nodes_of_type("call_expression"):
            if nodes.callee_text(src, call) != "Math.random":
                continue

            # Approximate the usage context by the surrounding expression text.
            parent = call.parent
            grandparent = parent.parent if parent is not None else None
            context_node = grandparent if grandparent is not None else parent
            context = src.text(context_node)
            if not SECURITY_KEYWORDS.search(context):
                continue

            patterns.append(self.create_pattern(
                PatternType.INSECURE_RANDOM,
                src.path,
                nodes.start_line(call),
                nodes.end_line(call),
                "Math.random() used in potentially security-sensitive context",
                "Math.random() is not cryptographically secure. "
                "For security purposes, use crypto.randomBytes() or crypto.getRandomValues().",
                nodes.truncate_code(context, 100),
                severity=Severity.WARNING,
                suggestion="Use crypto.randomUUID() or crypto.randomBytes() for security-sensitive operations",
                confidence=0.75,
            ))

        return patterns

    @staticmethod
    def _is_concatenation(node: Node) -> bool:
        if node.type != "binary_expression":
            return False
        operator = node.child_by_field_name("operator")
        return operator is not None and operator.type == "+"
