"""Analysis pipeline orchestrator.

Drives the FileAnalyzer over an ordered file list and builds the run-level
AnalysisResult. Files that cannot be read are skipped; every file that is
read is represented by exactly one FileAnalysisResult, in input order.
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from codeguard.analyzer import FileAnalyzer, build_fallback_result
from codeguard.discovery import detect_language, read_file_content
from codeguard.models.analysis import (
    AnalysisMode,
    AnalysisResult,
    AnalysisSummary,
    FileAnalysisResult,
    HIGH_QUALITY_THRESHOLD,
    MEDIUM_QUALITY_THRESHOLD,
)

logger = logging.getLogger(__name__)

BELOW_THRESHOLD_RECOMMENDATION = (
    "Overall code quality is below acceptable threshold. Consider comprehensive refactoring."
)
STANDING_RECOMMENDATIONS = (
    "Review security practices and implement recommended improvements.",
    "Consider implementing design patterns where appropriate.",
    "Ensure all code follows SOLID principles.",
)


@dataclass
class PipelineOptions:
    """Options for controlling pipeline execution.

    Attributes:
        mode: Analysis mode (frames the suggestion prompt)
        kt_enabled: Request knowledge-transfer narratives per file
        max_workers: Files analyzed concurrently (1 = sequential)
    """

    mode: AnalysisMode = AnalysisMode.STANDARD
    kt_enabled: bool = False
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")


@dataclass
class _PendingFile:
    path: Path
    content: str
    language: str


def compute_overall_score(file_results: Sequence[FileAnalysisResult]) -> float:
    """Arithmetic mean of final scores; 0.0 for an empty run."""
    if not file_results:
        return 0.0
    return sum(result.final_score for result in file_results) / len(file_results)


def build_recommendations(overall_score: float, low_quality_files: int) -> list[str]:
    """Rule-based run-level recommendations.

    Args:
        overall_score: Run overall score
        low_quality_files: Number of files scoring below the medium threshold

    Returns:
        Ordered recommendation strings
    """
    recommendations: list[str] = []
    if overall_score < MEDIUM_QUALITY_THRESHOLD:
        recommendations.append(BELOW_THRESHOLD_RECOMMENDATION)
    if low_quality_files > 0:
        recommendations.append(
            f"Focus on improving {low_quality_files} files with low quality scores."
        )
    recommendations.extend(STANDING_RECOMMENDATIONS)
    return recommendations


def build_summary(
    file_results: Sequence[FileAnalysisResult],
    overall_score: float,
) -> AnalysisSummary:
    """Derive summary statistics from per-file results.

    Tiers use the same cutoffs as QualityIndicator: >= 85 high,
    >= 70 medium, otherwise low.
    """
    high = sum(1 for r in file_results if r.final_score >= HIGH_QUALITY_THRESHOLD)
    medium = sum(
        1
        for r in file_results
        if MEDIUM_QUALITY_THRESHOLD <= r.final_score < HIGH_QUALITY_THRESHOLD
    )
    low = len(file_results) - high - medium

    return AnalysisSummary(
        total_files=len(file_results),
        average_score=overall_score,
        high_quality_files=high,
        medium_quality_files=medium,
        low_quality_files=low,
        critical_issues=sum(r.critical_issue_count for r in file_results),
        recommendations=build_recommendations(overall_score, low),
    )


class AnalysisAggregator:
    """Runs the FileAnalyzer across files and aggregates the results.

    The pipeline sequence:
    1. Read every file (unreadable files are logged and skipped)
    2. Analyze each file, sequentially or on a thread pool
    3. Compute the overall score and summary once all files have settled
    """

    def __init__(
        self,
        analyzer: FileAnalyzer,
        options: PipelineOptions | None = None,
        reader: Callable[[Path], str] = read_file_content,
        language_detector: Callable[[Path], str] = detect_language,
    ) -> None:
        """Initialize the aggregator.

        Args:
            analyzer: Per-file analyzer
            options: Pipeline execution options
            reader: Returns a file's text; may raise OSError/UnicodeDecodeError
            language_detector: Maps a path to a language label
        """
        self.analyzer = analyzer
        self.options = options or PipelineOptions()
        self._reader = reader
        self._detect_language = language_detector

    def run(self, paths: Sequence[Path | str]) -> AnalysisResult:
        """Analyze the given files.

        Args:
            paths: Ordered files to analyze

        Returns:
            AnalysisResult with file results in input order
        """
        logger.info("Analyzing %d files (mode: %s)", len(paths), self.options.mode.value)

        pending = self._read_all(paths)
        file_results = self._analyze_all(pending)

        overall_score = compute_overall_score(file_results)
        summary = build_summary(file_results, overall_score)

        logger.info(
            "Analysis complete. Overall score: %.2f",
            overall_score,
            extra={
                "extra_data": {
                    "overall_score": overall_score,
                    "total_files": summary.total_files,
                    "critical_issues": summary.critical_issues,
                }
            },
        )

        return AnalysisResult(
            overall_score=overall_score,
            file_results=file_results,
            summary=summary,
            timestamp=datetime.now(),
            mode=self.options.mode,
            kt_enabled=self.options.kt_enabled,
        )

    def _read_all(self, paths: Sequence[Path | str]) -> list[_PendingFile]:
        pending: list[_PendingFile] = []
        for raw_path in paths:
            path = Path(raw_path)
            try:
                content = self._reader(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
                continue
            pending.append(_PendingFile(path, content, self._detect_language(path)))
        return pending

    def _analyze_all(self, pending: list[_PendingFile]) -> list[FileAnalysisResult]:
        if self.options.max_workers == 1 or len(pending) <= 1:
            return [self._analyze_one(item) for item in pending]

        with ThreadPoolExecutor(max_workers=self.options.max_workers) as executor:
            futures = [executor.submit(self._analyze_one, item) for item in pending]
            results: list[FileAnalysisResult] = []
            for item, future in zip(pending, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.error("Worker failed for %s: %s", item.path, e)
                    results.append(
                        build_fallback_result(item.path, item.content, item.language, str(e))
                    )
            return results

    def _analyze_one(self, item: _PendingFile) -> FileAnalysisResult:
        logger.info("Analyzing file: %s", item.path)
        return self.analyzer.analyze_file(
            item.path,
            item.content,
            item.language,
            mode=self.options.mode,
            kt_enabled=self.options.kt_enabled,
        )
