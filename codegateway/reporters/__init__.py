from .console import ConsoleReporter
from .json_reporter import JsonReporter, load_patterns
from .sarif import SarifReporter

__all__ = ["ConsoleReporter", "JsonReporter", "SarifReporter", "load_patterns"]
