"""Analysis result entities.

This module contains the entities produced by an analysis run:
- ScoreWithReason: One evaluated dimension (score, reason, recommendations)
- CodeIssue: A single problem flagged by the model
- FileAnalysisResult: Per-file aggregate of scores, issues and metrics
- AnalysisSummary: Derived run-level statistics
- AnalysisResult: The run-level aggregate handed to report renderers
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# Metric values are coerced to one of these types by the response parser
FileMetrics = dict[str, int | float | str]

HIGH_QUALITY_THRESHOLD = 85.0
MEDIUM_QUALITY_THRESHOLD = 70.0

DEFAULT_REASON = "No reasoning provided"


class Dimension(Enum):
    """Scored aspect of a file. Values are the JSON field names."""

    CODE_QUALITY = "codeQuality"
    SOLID = "solid"
    DESIGN_PATTERNS = "designPatterns"
    SECURITY = "security"
    BUG_DETECTION = "bugDetection"

    @property
    def title(self) -> str:
        """Human-readable dimension name."""
        return _DIMENSION_TITLES[self]


_DIMENSION_TITLES = {
    Dimension.CODE_QUALITY: "Code Quality",
    Dimension.SOLID: "SOLID Principles",
    Dimension.DESIGN_PATTERNS: "Design Patterns",
    Dimension.SECURITY: "Security",
    Dimension.BUG_DETECTION: "Bug Detection",
}

# Fixed business weights; they must sum to 1.0
DIMENSION_WEIGHTS: dict[Dimension, float] = {
    Dimension.CODE_QUALITY: 0.25,
    Dimension.SOLID: 0.20,
    Dimension.DESIGN_PATTERNS: 0.15,
    Dimension.SECURITY: 0.20,
    Dimension.BUG_DETECTION: 0.20,
}


class QualityIndicator(Enum):
    """Quality tier derived from a final score."""

    GREEN = ("High Quality", "#28a745")
    YELLOW = ("Medium Quality", "#ffc107")
    RED = ("Low Quality", "#dc3545")

    def __init__(self, label: str, color: str) -> None:
        self.label = label
        self.color = color

    @classmethod
    def from_score(cls, score: float) -> "QualityIndicator":
        """Classify a score; boundary values belong to the higher tier."""
        if score >= HIGH_QUALITY_THRESHOLD:
            return cls.GREEN
        if score >= MEDIUM_QUALITY_THRESHOLD:
            return cls.YELLOW
        return cls.RED


class AnalysisMode(Enum):
    """Analysis mode. Only biases the suggestion prompt framing."""

    STANDARD = "standard"
    QA_AUTOMATION = "qa_automation"
    DEVOPS_TESTING = "devops_testing"
    DEVELOPER_REVIEW = "developer_review"

    @property
    def enforces_quality_gate(self) -> bool:
        """Whether a failed quality gate should fail the process."""
        return self in {AnalysisMode.QA_AUTOMATION, AnalysisMode.DEVOPS_TESTING}

    @classmethod
    def parse(cls, value: "str | AnalysisMode") -> "AnalysisMode":
        """Parse a mode name leniently (case and '-'/'_' insensitive).

        Raises:
            ValueError: If the name does not match any mode
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid analysis mode: {value}. Valid: {valid}")


class ReportType(Enum):
    """Which HTML reports to generate."""

    TECHNICAL = "technical"
    NON_TECHNICAL = "non_technical"
    BOTH = "both"

    @property
    def includes_technical(self) -> bool:
        return self in {ReportType.TECHNICAL, ReportType.BOTH}

    @property
    def includes_executive(self) -> bool:
        return self in {ReportType.NON_TECHNICAL, ReportType.BOTH}

    @classmethod
    def parse(cls, value: "str | ReportType") -> "ReportType":
        """Parse a report type name leniently.

        Raises:
            ValueError: If the name does not match any report type
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        for report_type in cls:
            if report_type.value == normalized:
                return report_type
        valid = ", ".join(r.value for r in cls)
        raise ValueError(f"Invalid report type: {value}. Valid: {valid}")


@dataclass(frozen=True)
class ScoreWithReason:
    """A single evaluated dimension.

    Attributes:
        score: Score, nominally 0-100 (model output is passed through unclamped)
        reason: Explanation for the score
        recommendations: Ordered improvement recommendations
    """

    score: float
    reason: str = DEFAULT_REASON
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "reason": self.reason,
            "recommendations": list(self.recommendations),
        }


@dataclass
class CodeIssue:
    """A problem flagged during issue identification.

    Attributes:
        severity: CRITICAL, HIGH, MEDIUM or LOW (compared case-insensitively)
        type: Free-text category (Security, Performance, ...)
        description: What is wrong
        suggestion: How to fix it
        line_number: Line the issue refers to, if the model supplied one
    """

    severity: str
    type: str
    description: str
    suggestion: str
    line_number: int | None = None

    @property
    def is_critical(self) -> bool:
        return self.severity.strip().upper() == "CRITICAL"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "severity": self.severity,
            "type": self.type,
            "description": self.description,
            "lineNumber": self.line_number,
            "suggestion": self.suggestion,
        }


def _pending_score() -> ScoreWithReason:
    return ScoreWithReason(score=0.0, reason="Not yet analyzed")


@dataclass
class FileAnalysisResult:
    """Analysis result for a single file.

    Created empty when analysis of a file starts; dimension scores are filled
    in as each model call returns, then calculate_final_score() fixes the
    weighted score and quality tier.

    Attributes:
        filename: Base name of the file
        filepath: Path as supplied by file discovery
        language: Detected language label
        code_quality: Readability, maintainability and documentation
        solid: SOLID principle compliance
        design_patterns: Design pattern usage
        security: Security posture
        bug_detection: Likelihood of latent bugs
        final_score: Weighted score across the five dimensions
        quality_indicator: Tier derived from final_score
        issues: Issues flagged by the model
        suggestions: Free-text improvement suggestions
        metrics: Extracted code metrics
        kt_purpose: Knowledge-transfer narrative on purpose (KT mode only)
        kt_design: Knowledge-transfer narrative on design (KT mode only)
        kt_modules: Knowledge-transfer narrative on modules (KT mode only)
        error: Error description when this is a fallback result
    """

    filename: str
    filepath: str
    language: str = "Unknown"
    code_quality: ScoreWithReason = field(default_factory=_pending_score)
    solid: ScoreWithReason = field(default_factory=_pending_score)
    design_patterns: ScoreWithReason = field(default_factory=_pending_score)
    security: ScoreWithReason = field(default_factory=_pending_score)
    bug_detection: ScoreWithReason = field(default_factory=_pending_score)
    final_score: float = 0.0
    quality_indicator: QualityIndicator = QualityIndicator.RED
    issues: list[CodeIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    metrics: FileMetrics = field(default_factory=dict)
    kt_purpose: str | None = None
    kt_design: str | None = None
    kt_modules: str | None = None
    error: str | None = None

    def get_score(self, dimension: Dimension) -> ScoreWithReason:
        """Get the evaluated score for a dimension."""
        return getattr(self, _DIMENSION_ATTRS[dimension])

    def set_score(self, dimension: Dimension, value: ScoreWithReason) -> None:
        """Set the evaluated score for a dimension."""
        setattr(self, _DIMENSION_ATTRS[dimension], value)

    def calculate_final_score(self) -> float:
        """Compute the weighted final score and quality tier.

        Returns:
            The final score
        """
        self.final_score = (
            self.code_quality.score * DIMENSION_WEIGHTS[Dimension.CODE_QUALITY]
            + self.solid.score * DIMENSION_WEIGHTS[Dimension.SOLID]
            + self.design_patterns.score * DIMENSION_WEIGHTS[Dimension.DESIGN_PATTERNS]
            + self.security.score * DIMENSION_WEIGHTS[Dimension.SECURITY]
            + self.bug_detection.score * DIMENSION_WEIGHTS[Dimension.BUG_DETECTION]
        )
        self.quality_indicator = QualityIndicator.from_score(self.final_score)
        return self.final_score

    @property
    def critical_issue_count(self) -> int:
        return sum(1 for issue in self.issues if issue.is_critical)

    @property
    def is_fallback(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the report JSON field names."""
        data: dict[str, Any] = {
            "filename": self.filename,
            "filepath": self.filepath,
            "language": self.language,
        }
        for dimension in Dimension:
            score = self.get_score(dimension)
            data[dimension.value] = score.score
            data[f"{dimension.value}Reason"] = score.reason
            data[f"{dimension.value}Recommendations"] = list(score.recommendations)

        data.update(
            {
                "finalScore": self.final_score,
                "qualityIndicator": self.quality_indicator.name,
                "issues": [issue.to_dict() for issue in self.issues],
                "suggestions": list(self.suggestions),
                "metrics": dict(self.metrics),
            }
        )
        if self.kt_purpose is not None:
            data["ktPurpose"] = self.kt_purpose
        if self.kt_design is not None:
            data["ktDesign"] = self.kt_design
        if self.kt_modules is not None:
            data["ktModules"] = self.kt_modules
        if self.error is not None:
            data["error"] = self.error
        return data


_DIMENSION_ATTRS = {
    Dimension.CODE_QUALITY: "code_quality",
    Dimension.SOLID: "solid",
    Dimension.DESIGN_PATTERNS: "design_patterns",
    Dimension.SECURITY: "security",
    Dimension.BUG_DETECTION: "bug_detection",
}


@dataclass(frozen=True)
class AnalysisSummary:
    """Derived run-level statistics.

    Attributes:
        total_files: Number of files represented in the result
        average_score: Mirrors AnalysisResult.overall_score
        high_quality_files: Files with final score >= 85
        medium_quality_files: Files with 70 <= final score < 85
        low_quality_files: Files with final score < 70
        critical_issues: CRITICAL issues across all files
        recommendations: Rule-based run-level recommendations
    """

    total_files: int = 0
    average_score: float = 0.0
    high_quality_files: int = 0
    medium_quality_files: int = 0
    low_quality_files: int = 0
    critical_issues: int = 0
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "totalFiles": self.total_files,
            "averageScore": self.average_score,
            "highQualityFiles": self.high_quality_files,
            "mediumQualityFiles": self.medium_quality_files,
            "lowQualityFiles": self.low_quality_files,
            "criticalIssues": self.critical_issues,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Run-level aggregate consumed by report renderers and the CLI.

    Attributes:
        overall_score: Mean of per-file final scores (0.0 when empty)
        file_results: Per-file results in input order
        summary: Derived statistics
        timestamp: Local wall-clock time at aggregation completion
        mode: Analysis mode the run used
        kt_enabled: Whether knowledge-transfer narratives were requested
    """

    overall_score: float
    file_results: list[FileAnalysisResult]
    summary: AnalysisSummary
    timestamp: datetime
    mode: AnalysisMode = AnalysisMode.STANDARD
    kt_enabled: bool = False

    @property
    def quality_indicator(self) -> QualityIndicator:
        return QualityIndicator.from_score(self.overall_score)

    def passes_threshold(self, threshold: float) -> bool:
        """Quality gate comparison used by the CLI."""
        return self.overall_score >= threshold

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the report JSON field names."""
        return {
            "overallScore": self.overall_score,
            "fileResults": [result.to_dict() for result in self.file_results],
            "summary": self.summary.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "mode": self.mode.name,
            "ktEnabled": self.kt_enabled,
        }
