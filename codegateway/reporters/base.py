from abc import ABC, abstractmethod
from typing import List

from codegateway.models.analysis import AnalysisResult


class BaseReporter(ABC):
    @abstractmethod
    def report(self, results: List[AnalysisResult]) -> None:
        """
        Report the findings of an analysis run.

        Args:
            results: One analysis result per analyzed file.
        """
        pass
