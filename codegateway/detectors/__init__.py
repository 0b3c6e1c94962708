from typing import List

from .base import BaseDetector
from .code_quality import CodeQualityDetector
from .error_handling import ErrorHandlingDetector
from .naming import NamingDetector
from .security import SecurityDetector


def default_detectors() -> List[BaseDetector]:
    """The built-in detector set, in reporting order."""
    return [
        NamingDetector(),
        ErrorHandlingDetector(),
        SecurityDetector(),
        CodeQualityDetector(),
    ]


__all__ = [
    "BaseDetector",
    "CodeQualityDetector",
    "ErrorHandlingDetector",
    "NamingDetector",
    "SecurityDetector",
    "default_detectors",
]
