class CodeGatewayError(Exception):
    """Base class for errors raised by codegateway."""


class ConfigError(CodeGatewayError, ValueError):
    """Raised when a configuration file cannot be read or validated."""
