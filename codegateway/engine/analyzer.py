import asyncio
import time
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from codegateway.analyzers.parser_factory import detect_language
from codegateway.config.detectors import DetectorSettings
from codegateway.config.engine import ResolvedConfig
from codegateway.detectors import BaseDetector, default_detectors
from codegateway.models.analysis import AnalysisResult, AnalysisSummary
from codegateway.models.pattern import (
    PatternRecord,
    PatternType,
    Severity,
    compare_severity,
    meets_severity_threshold,
)
from codegateway.utils.file_utils import matches_glob
from codegateway.utils.logging import get_logger

logger = get_logger(__name__)

ConfigOverride = Union[ResolvedConfig, Dict[str, Any]]


def _compare_patterns(a: PatternRecord, b: PatternRecord) -> int:
    severity_diff = compare_severity(a.severity, b.severity)
    if severity_diff != 0:
        return severity_diff
    return a.start_line - b.start_line


class Analyzer:
    """
    Runs the detector set over source files and merges their findings.

    Detectors run concurrently in the event loop's default executor. A
    detector that raises is logged and contributes nothing; it never
    cancels the others.
    """

    def __init__(self, config: Optional[ResolvedConfig] = None, detectors: Optional[Sequence[BaseDetector]] = None):
        self._config = config or ResolvedConfig.default()
        self.detectors: List[BaseDetector] = list(detectors) if detectors is not None else default_detectors()

    @property
    def config(self) -> ResolvedConfig:
        return self._config.model_copy()

    def update_config(self, **changes) -> None:
        self._config = self._merge_config(changes)

    async def analyze_file(
        self,
        source: str,
        path: str,
        *,
        config: Optional[ConfigOverride] = None,
        pattern_types: Optional[Iterable[PatternType]] = None,
        min_severity: Optional[Severity] = None,
    ) -> AnalysisResult:
        """
        Analyzes a single file.

        Args:
            source: File contents.
            path: File path; selects the language and is matched against `exclude`.
            config: A full ResolvedConfig, or a mapping of fields layered over the analyzer's config.
            pattern_types: Only run detectors declaring at least one of these types.
            min_severity: Overrides `config.min_severity` for this call.
        """
        start = time.perf_counter()
        merged = self._merge_config(config)
        language = detect_language(path)

        if matches_glob(path, merged.exclude):
            logger.debug("file_excluded", file=path)
            return self._result(path, language, [], start)

        detectors = self._applicable_detectors(language, pattern_types, merged)
        settings = DetectorSettings.from_config(merged)

        detector_results = await asyncio.gather(*[
            self._run_detector(detector, source, path, settings) for detector in detectors
        ])
        patterns = [pattern for result in detector_results for pattern in result]

        threshold = Severity(min_severity) if min_severity is not None else merged.min_severity
        patterns = [p for p in patterns if meets_severity_threshold(p.severity, threshold)]

        overrides = merged.severity_overrides
        patterns = [
            p.model_copy(update={"severity": overrides[p.type]}) if p.type in overrides else p
            for p in patterns
        ]

        patterns.sort(key=cmp_to_key(_compare_patterns))
        return self._result(path, language, patterns, start)

    async def analyze_files(self, files: Iterable[Any], **options) -> List[AnalysisResult]:
        """
        Analyzes several files concurrently.

        `files` holds `(path, source)` pairs or objects exposing `path` and
        `content`. Keyword options are passed to `analyze_file`.
        """
        jobs = []
        for item in files:
            if isinstance(item, (tuple, list)):
                path, source = item
            else:
                path, source = item.path, item.content
            jobs.append(self.analyze_file(source, path, **options))
        return list(await asyncio.gather(*jobs))

    def summarize(self, results: Iterable[AnalysisResult]) -> AnalysisSummary:
        return AnalysisSummary.from_results(results)

    def _merge_config(self, config: Optional[ConfigOverride]) -> ResolvedConfig:
        if config is None:
            return self._config
        if isinstance(config, ResolvedConfig):
            return config
        data = self._config.model_dump()
        data.update(ResolvedConfig.normalize_keys(dict(config)))
        return ResolvedConfig.model_validate(data)

    def _applicable_detectors(
        self,
        language: Optional[str],
        pattern_types: Optional[Iterable[PatternType]],
        config: ResolvedConfig,
    ) -> List[BaseDetector]:
        if language is None:
            return []

        requested = set(pattern_types) if pattern_types is not None else None
        enabled = set(config.enabled_patterns)

        applicable = []
        for detector in self.detectors:
            if language not in detector.languages:
                continue
            if any((requested is None or p in requested) and p in enabled for p in detector.patterns):
                applicable.append(detector)
        return applicable

    async def _run_detector(
        self, detector: BaseDetector, source: str, path: str, settings: DetectorSettings
    ) -> List[PatternRecord]:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, detector.analyze, source, path, settings)
        except Exception:
            logger.exception("detector_failed", detector=detector.id, file=path)
            return []

    @staticmethod
    def _result(path: str, language: Optional[str], patterns: List[PatternRecord], start: float) -> AnalysisResult:
        return AnalysisResult(
            file=path,
            language=language,
            patterns=patterns,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
